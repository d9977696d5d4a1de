"""
Main application controller for the Bookmark Interchange Engine.

Wires the parser, icon store, storage, importer, exporter and seeder from
one configuration object so callers (the CLI or an HTTP layer) deal with a
single entry point.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..config.pydantic_config import InterchangeConfig
from .bookmark_importer import BookmarkImportCoordinator
from .bookmark_parser import BookmarkTreeParser
from .data_models import ExportResult, ImportResult
from .database import BookmarkDatabase
from .default_seeder import DefaultContentSeeder
from .html_renderer import BookmarkExportRenderer
from .icon_store import IconAssetStore


class BookmarkInterchangeService:
    """Import, export and seeding over one database and icon store."""

    def __init__(
        self,
        config: Optional[InterchangeConfig] = None,
        database: Optional[BookmarkDatabase] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Configuration (defaults apply when omitted)
            database: Pre-built storage, mainly for tests
        """
        self.config = config or InterchangeConfig()
        self.logger = logging.getLogger(__name__)

        locale = self.config.locale
        self.database = database or BookmarkDatabase(
            self.config.storage.db_path, busy_timeout=self.config.storage.busy_timeout
        )
        self.icon_store = IconAssetStore(self.config.icons, locale=locale)
        self.parser = BookmarkTreeParser(locale)
        self.importer = BookmarkImportCoordinator(
            self.database, self.icon_store, parser=self.parser, locale=locale
        )
        self.exporter = BookmarkExportRenderer(
            self.database, self.icon_store, config=self.config.export, locale=locale
        )
        self._seeder: Optional[DefaultContentSeeder] = None

    @property
    def seeder(self) -> DefaultContentSeeder:
        """Seeder, created on first use (it opens an HTTP session)."""
        if self._seeder is None:
            self._seeder = DefaultContentSeeder(
                self.database,
                self.icon_store,
                parser=self.parser,
                locale=self.config.locale,
            )
        return self._seeder

    def import_bookmarks(
        self, user_id: int, data: Union[bytes, str], fmt: Optional[str] = None
    ) -> ImportResult:
        """Import an uploaded bookmark file for a user."""
        return self.importer.import_upload(user_id, data, fmt)

    def import_file(
        self, user_id: int, path: Union[str, Path], fmt: Optional[str] = None
    ) -> ImportResult:
        """Import a bookmark file from disk for a user."""
        path = Path(path)
        if fmt is None and path.suffix.lower() in (".json", ".html", ".htm"):
            fmt = "json" if path.suffix.lower() == ".json" else "html"
        self.logger.info(f"Importing {path} for user {user_id}")
        return self.import_bookmarks(user_id, path.read_bytes(), fmt)

    def export_bookmarks(self, user_id: int, now: Optional[datetime] = None) -> ExportResult:
        """Export a user's bookmarks as HTML."""
        return self.exporter.export(user_id, now=now)

    def upload_icon(self, data: bytes, mime: str) -> str:
        """Store an uploaded link icon and return its public URL."""
        return self.icon_store.upload_icon(data, mime)

    def seed_defaults(self, path: Union[str, Path]) -> ImportResult:
        """Seed public default content from a JSON file."""
        return self.seeder.seed_file(path)
