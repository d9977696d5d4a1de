"""
Pydantic-based configuration system for the Bookmark Interchange Engine.

Configuration is loaded from a TOML or JSON file (or defaults), overridden
by environment variables, and validated into an ``InterchangeConfig``.
"""

import json
import os
from pathlib import Path
from typing import Dict, Literal, Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.error_handler import ConfigurationError

ENV_PREFIX = "BOOKMARK_INTERCHANGE_"


class StorageConfig(BaseModel):
    """Category/link database settings."""

    db_path: Path = Field(
        default=Path("bookmarks.db"),
        description="SQLite database file",
        json_schema_extra={
            "error_msg": "Database path must be a file path. "
            "Its parent directory is created if it doesn't exist."
        },
    )
    busy_timeout: float = Field(
        default=30.0,
        ge=0.0,
        le=600.0,
        description="Seconds to wait for the database write lock",
        json_schema_extra={
            "error_msg": "Busy timeout must be between 0 and 600 seconds."
        },
    )

    @field_validator("db_path", mode="before")
    @classmethod
    def validate_db_path(cls, v):
        """Ensure the database path is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v


class IconStoreConfig(BaseModel):
    """Content-addressed icon storage settings."""

    upload_root: Path = Field(
        default=Path("uploads"),
        description="Root directory served under the public prefix",
        json_schema_extra={
            "error_msg": "Upload root must be a directory path. "
            "It is created on first write."
        },
    )
    icon_dir: str = Field(
        default="linkicons",
        min_length=1,
        description="Icon sub directory below the upload root",
    )
    public_prefix: str = Field(
        default="/uploads",
        description="URL prefix the upload root is served under",
    )
    hash_algorithm: Literal["sha256", "md5"] = Field(
        default="sha256",
        description="Content hash used for icon file names",
        json_schema_extra={
            "error_msg": "Hash algorithm must be 'sha256' or 'md5'."
        },
    )
    max_upload_bytes: int = Field(
        default=2 * 1024 * 1024,
        ge=1024,
        le=50 * 1024 * 1024,
        description="Largest icon accepted by direct upload",
        json_schema_extra={
            "error_msg": "Max upload size must be between 1 KiB and 50 MiB."
        },
    )
    fetch_timeout: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Timeout for remote icon downloads in seconds",
    )

    @field_validator("upload_root", mode="before")
    @classmethod
    def validate_upload_root(cls, v):
        """Ensure the upload root is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("icon_dir", "public_prefix")
    @classmethod
    def strip_slashes(cls, v, info):
        """Keep path segments free of stray slashes."""
        if info.field_name == "public_prefix":
            return "/" + v.strip("/")
        cleaned = v.strip("/")
        if not cleaned or ".." in cleaned.split("/"):
            raise ValueError(f"Invalid icon directory: {v!r}")
        return cleaned


class ExportConfig(BaseModel):
    """Bookmark HTML export settings."""

    icon_workers: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Concurrent icon reads during export",
        json_schema_extra={
            "error_msg": "Icon workers must be between 1 and 32."
        },
    )
    document_title: str = Field(
        default="Bookmarks",
        description="TITLE and H1 of the exported document",
    )


class InterchangeConfig(BaseModel):
    """Main configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    icons: IconStoreConfig = Field(default_factory=IconStoreConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    locale: Literal["en", "zh"] = Field(
        default="en",
        description="Language for created labels and error messages",
        json_schema_extra={"error_msg": "Locale must be 'en' or 'zh'."},
    )


class ConfigurationManager:
    """Manages loading and validation of configuration from multiple sources."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML or JSON)
        """
        self._config: Optional[InterchangeConfig] = None
        self._load_configuration(Path(config_path) if config_path else None)

    def _get_default_config_paths(self) -> list:
        """Get list of default configuration file paths to try."""
        cwd = Path.cwd()
        return [
            cwd / "bookmark_interchange.toml",
            cwd / "bookmark_interchange.json",
        ]

    def _load_configuration(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file or use defaults."""
        config_data: Dict = {}

        if config_path:
            config_data = self._load_config_file(config_path)
        else:
            for path in self._get_default_config_paths():
                if path.exists():
                    config_data = self._load_config_file(path)
                    break

        self._apply_env_overrides(config_data)

        try:
            self._config = InterchangeConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e)) from e

    def _load_config_file(self, config_path: Path) -> Dict:
        """Load configuration from TOML or JSON file."""
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            if config_path.suffix.lower() == ".toml":
                return toml.load(config_path)
            elif config_path.suffix.lower() == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    return json.load(f)
        except (OSError, ValueError, toml.TomlDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: {e}"
            ) from e

        raise ConfigurationError(
            f"Unsupported configuration file format: {config_path.suffix}"
        )

    def _apply_env_overrides(self, config_data: Dict) -> None:
        """Apply environment variable overrides on top of file values."""
        db_path = os.getenv(f"{ENV_PREFIX}DB_PATH")
        upload_root = os.getenv(f"{ENV_PREFIX}UPLOAD_ROOT")
        locale = os.getenv(f"{ENV_PREFIX}LOCALE")

        if db_path:
            config_data.setdefault("storage", {})["db_path"] = db_path
        if upload_root:
            config_data.setdefault("icons", {})["upload_root"] = upload_root
        if locale:
            config_data["locale"] = locale

    @property
    def config(self) -> InterchangeConfig:
        """Get the current configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")
        return self._config

    @staticmethod
    def create_sample_config(output_path: Path, format: str = "toml") -> None:
        """Create a sample configuration file."""
        sample_config = {
            "locale": "en",
            "storage": {"db_path": "bookmarks.db", "busy_timeout": 30.0},
            "icons": {
                "upload_root": "uploads",
                "icon_dir": "linkicons",
                "public_prefix": "/uploads",
                "hash_algorithm": "sha256",
                "max_upload_bytes": 2 * 1024 * 1024,
                "fetch_timeout": 10.0,
            },
            "export": {"icon_workers": 8, "document_title": "Bookmarks"},
        }

        output_path = Path(output_path)
        if format.lower() == "toml":
            with open(output_path, "w", encoding="utf-8") as f:
                toml.dump(sample_config, f)
        elif format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(sample_config, f, indent=2)
        else:
            raise ValueError(f"Unsupported format: {format}")


def _custom_error_message(error_detail: dict) -> Optional[str]:
    """Look up the ``error_msg`` hint declared on the failing field."""
    model = InterchangeConfig
    loc = error_detail.get("loc", ())
    field_info = None
    for part in loc:
        if not isinstance(part, str) or model is None:
            return None
        field_info = model.model_fields.get(part)
        if field_info is None:
            return None
        annotation = field_info.annotation
        model = annotation if isinstance(annotation, type) and issubclass(annotation, BaseModel) else None
    if field_info is None or not isinstance(field_info.json_schema_extra, dict):
        return None
    return field_info.json_schema_extra.get("error_msg")


def format_config_error(error: ValidationError) -> str:
    """
    Convert a pydantic ValidationError into a readable message.

    Args:
        error: Pydantic ValidationError instance

    Returns:
        One line per failing field, prefixed by its dotted location
    """
    lines = ["Configuration validation failed:"]
    for error_detail in error.errors():
        location = ".".join(str(part) for part in error_detail["loc"]) or "configuration"
        hint = _custom_error_message(error_detail)
        lines.append(f"  {location}: {hint or error_detail['msg']}")
    return "\n".join(lines)
