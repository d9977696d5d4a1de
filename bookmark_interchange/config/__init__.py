"""
Configuration for the Bookmark Interchange Engine.
"""

from .pydantic_config import (
    ConfigurationManager,
    ExportConfig,
    IconStoreConfig,
    InterchangeConfig,
    StorageConfig,
    format_config_error,
)

__all__ = [
    "ConfigurationManager",
    "ExportConfig",
    "IconStoreConfig",
    "InterchangeConfig",
    "StorageConfig",
    "format_config_error",
]
