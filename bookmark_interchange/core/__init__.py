"""
Core bookmark interchange modules.

This package contains the bookmark tree parser (HTML and JSON), the
content-addressed icon store, category/link storage, the transactional
importer, the HTML export renderer and the default content seeder.
"""

from .bookmark_importer import BookmarkImportCoordinator
from .bookmark_parser import BookmarkTreeNormalizer, BookmarkTreeParser
from .data_models import (
    BookmarkNode,
    Category,
    ExportResult,
    FolderNode,
    ImportResult,
    Link,
    LinkNode,
)
from .database import BookmarkDatabase
from .default_seeder import DefaultContentSeeder
from .html_renderer import BookmarkExportRenderer
from .icon_store import IconAssetStore
from .interchange_service import BookmarkInterchangeService

__all__ = [
    "BookmarkDatabase",
    "BookmarkExportRenderer",
    "BookmarkImportCoordinator",
    "BookmarkInterchangeService",
    "BookmarkNode",
    "BookmarkTreeNormalizer",
    "BookmarkTreeParser",
    "Category",
    "DefaultContentSeeder",
    "ExportResult",
    "FolderNode",
    "IconAssetStore",
    "ImportResult",
    "Link",
    "LinkNode",
]
