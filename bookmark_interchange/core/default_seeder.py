"""
Public default content seeding.

Loads a JSON array of folders and writes it as public categories and links
(no owner, ``is_public`` set) that anonymous visitors see. Seeding is
repeatable: existing folders and links are found and reused rather than
duplicated, and remote icons are downloaded into the icon store.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests

from ..utils.error_handler import InvalidFormatError
from ..utils.localization import DEFAULT_LOCALE, get_label
from .bookmark_parser import BookmarkTreeParser
from .data_models import BookmarkNode, FolderNode, ImportResult, LinkNode
from .database import BookmarkDatabase, StorageSession
from .icon_store import IconAssetStore


class DefaultContentSeeder:
    """Seeds public categories and links from a folder tree."""

    def __init__(
        self,
        database: BookmarkDatabase,
        icon_store: IconAssetStore,
        parser: Optional[BookmarkTreeParser] = None,
        session: Optional[requests.Session] = None,
        locale: str = DEFAULT_LOCALE,
    ):
        """
        Initialize the seeder.

        Args:
            database: Category/link storage
            icon_store: Store that downloads and keeps icons
            parser: Parser used to validate seed files
            session: HTTP session for icon downloads
            locale: Language of the label given to untitled folders
        """
        self.database = database
        self.icon_store = icon_store
        self.parser = parser or BookmarkTreeParser(locale)
        self.http = session or requests.Session()
        self.locale = locale
        self.logger = logging.getLogger(__name__)

    def seed_file(self, path: Union[str, Path]) -> ImportResult:
        """
        Seed from a JSON file.

        Args:
            path: JSON file holding an array of folder nodes

        Returns:
            ImportResult counting newly created rows

        Raises:
            InvalidFormatError: If the file is not a JSON array
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8-sig")
        if not text.lstrip().startswith("["):
            raise InvalidFormatError(f"{path} must contain a JSON array")
        return self.seed(self.parser.parse_json(text))

    def seed(self, nodes: Sequence[BookmarkNode]) -> ImportResult:
        """
        Seed public content from top-level folders.

        Top-level links are skipped; public content is always foldered.
        Remote icons are downloaded before the write transaction opens.

        Args:
            nodes: Canonical bookmark forest

        Returns:
            ImportResult counting newly created rows
        """
        folders = []
        for index, node in enumerate(nodes):
            if isinstance(node, FolderNode):
                folders.append(node)
            else:
                self.logger.warning(f"Skipping top-level non-folder node {index}")

        icons = self.resolve_icons(folders)

        result = ImportResult()
        with self.database.transaction() as session:
            for index, folder in enumerate(folders):
                result = self._seed_folder(session, folder, None, index, result, icons)

        self.logger.info(
            f"Seeded {result.imported_categories} categories and "
            f"{result.imported_links} links"
        )
        return result

    def resolve_icons(self, folders: Sequence[FolderNode]) -> Dict[str, Optional[str]]:
        """
        Download every distinct link icon in the given folders.

        Args:
            folders: Seed folders

        Returns:
            Map of raw icon reference to stored reference
        """
        icons: Dict[str, Optional[str]] = {}
        stack: List[BookmarkNode] = list(folders)
        while stack:
            node = stack.pop()
            if isinstance(node, FolderNode):
                stack.extend(node.children)
            elif isinstance(node, LinkNode):
                if node.icon and node.icon not in icons:
                    icons[node.icon] = self.icon_store.fetch_remote(
                        node.icon, session=self.http
                    )
            else:
                raise TypeError(f"Unsupported bookmark node: {type(node).__name__}")
        return icons

    def _seed_folder(
        self,
        session: StorageSession,
        folder: FolderNode,
        parent_id: Optional[int],
        sort_order: int,
        result: ImportResult,
        icons: Dict[str, Optional[str]],
    ) -> ImportResult:
        name = folder.title or get_label("unnamed_category", self.locale)
        category = session.find_category(None, name, parent_id=parent_id, is_public=True)
        if category is not None:
            category_id = category.id
        else:
            category_id = session.create_category(
                name=name,
                user_id=None,
                parent_id=parent_id,
                sort_order=sort_order,
                is_public=True,
            )
            result = ImportResult(
                result.imported_categories + 1, result.imported_links
            )

        folder_order = 0
        link_order = 0
        for child in folder.children:
            if isinstance(child, FolderNode):
                result = self._seed_folder(
                    session, child, category_id, folder_order, result, icons
                )
                folder_order += 1
            elif isinstance(child, LinkNode):
                icon = icons.get(child.icon) if child.icon else None
                created = self._seed_link(session, child, category_id, link_order, icon)
                if created:
                    result = ImportResult(
                        result.imported_categories, result.imported_links + 1
                    )
                link_order += 1
            else:
                raise TypeError(f"Unsupported bookmark node: {type(child).__name__}")
        return result

    def _seed_link(
        self,
        session: StorageSession,
        link: LinkNode,
        category_id: int,
        sort_order: int,
        icon: Optional[str],
    ) -> bool:
        """Find or create one public link; return True when created."""
        existing = session.find_link(None, category_id, link.url)
        if existing is not None:
            if icon and existing.icon != icon:
                session.update_link_icon(existing.id, icon)
            return False

        session.create_link(
            title=link.title,
            url=link.url,
            category_id=category_id,
            user_id=None,
            sort_order=sort_order,
            description=link.description,
            icon=icon,
        )
        return True
