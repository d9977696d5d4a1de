"""
Bookmark import coordinator.

Writes a canonical bookmark tree into a user's categories and links inside a
single transaction: either every folder and link of the upload is stored, or
none is.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

from ..utils.error_handler import EmptyContentError
from ..utils.localization import DEFAULT_LOCALE, get_label, get_message
from .bookmark_parser import BookmarkTreeParser
from .data_models import BookmarkNode, FolderNode, ImportResult, LinkNode, count_nodes
from .database import BookmarkDatabase, StorageSession
from .icon_store import IconAssetStore


@dataclass(frozen=True)
class ImportTally:
    """
    Running totals threaded through the recursive walk.

    Attributes:
        categories: Categories created so far
        links: Links created so far
        fallback_category_id: Fallback category resolved earlier in this call
    """

    categories: int = 0
    links: int = 0
    fallback_category_id: Optional[int] = None


class BookmarkImportCoordinator:
    """
    Persists bookmark trees as categories and links.

    Folders become categories nested under their parent folder's category.
    Links outside any folder go into the user's fallback category, which is
    looked up before it is created and then reused for the rest of the call.
    """

    def __init__(
        self,
        database: BookmarkDatabase,
        icon_store: IconAssetStore,
        parser: Optional[BookmarkTreeParser] = None,
        locale: str = DEFAULT_LOCALE,
    ):
        """
        Initialize the import coordinator.

        Args:
            database: Category/link storage
            icon_store: Store used to resolve embedded icons
            parser: Parser for the text entry points
            locale: Language for created labels and error messages
        """
        self.database = database
        self.icon_store = icon_store
        self.parser = parser or BookmarkTreeParser(locale)
        self.locale = locale
        self.logger = logging.getLogger(__name__)

    @property
    def fallback_name(self) -> str:
        return get_label("imported_bookmarks", self.locale)

    @property
    def unnamed_name(self) -> str:
        return get_label("unnamed_category", self.locale)

    def import_html(self, user_id: int, html: str) -> ImportResult:
        """Parse Netscape bookmark HTML and import it."""
        return self.import_tree(user_id, self.parser.parse_html(html))

    def import_json(self, user_id: int, text: str) -> ImportResult:
        """Parse a JSON bookmark tree and import it."""
        return self.import_tree(user_id, self.parser.parse_json(text))

    def import_upload(
        self, user_id: int, data: Union[bytes, str], fmt: Optional[str] = None
    ) -> ImportResult:
        """
        Decode, parse and import a raw upload.

        Args:
            user_id: Importing user
            data: Uploaded bytes or text
            fmt: ``"html"``, ``"json"`` or None to detect

        Returns:
            ImportResult with the created row counts
        """
        text = self.parser.decode_upload(data)
        return self.import_tree(user_id, self.parser.parse(text, fmt))

    def import_tree(self, user_id: int, tree: Sequence[BookmarkNode]) -> ImportResult:
        """
        Persist a canonical bookmark tree for a user.

        Args:
            user_id: Owner of every created row
            tree: Top-level bookmark nodes

        Returns:
            ImportResult with the created row counts

        Raises:
            EmptyContentError: If the tree has no top-level nodes
            StorageError: If any write fails; nothing is persisted
        """
        if not tree:
            raise EmptyContentError(get_message("empty_content", self.locale))

        folders, links = count_nodes(tree)
        self.logger.info(
            f"Importing {folders} folders and {links} links for user {user_id}"
        )

        with self.database.transaction() as session:
            tally = self._persist_nodes(session, tree, user_id, None, ImportTally())

        self.logger.info(
            f"Import completed for user {user_id}: "
            f"{tally.categories} categories, {tally.links} links"
        )
        return ImportResult(
            imported_categories=tally.categories, imported_links=tally.links
        )

    def _persist_nodes(
        self,
        session: StorageSession,
        nodes: Sequence[BookmarkNode],
        user_id: int,
        parent_id: Optional[int],
        tally: ImportTally,
    ) -> ImportTally:
        """Depth-first write of sibling nodes in document order."""
        for node in nodes:
            if isinstance(node, FolderNode):
                category_id = session.create_category(
                    name=node.title or self.unnamed_name,
                    user_id=user_id,
                    parent_id=parent_id,
                    sort_order=_sort_key(node.add_date),
                    is_public=False,
                )
                tally = replace(tally, categories=tally.categories + 1)
                tally = self._persist_nodes(
                    session, node.children, user_id, category_id, tally
                )
            elif isinstance(node, LinkNode):
                category_id = parent_id
                if category_id is None:
                    category_id, tally = self._resolve_fallback(session, user_id, tally)
                session.create_link(
                    title=node.title or node.url,
                    url=node.url,
                    category_id=category_id,
                    user_id=user_id,
                    sort_order=_sort_key(node.add_date),
                    description=node.description,
                    icon=self.icon_store.persist(node.icon),
                )
                tally = replace(tally, links=tally.links + 1)
            else:
                raise TypeError(f"Unsupported bookmark node: {type(node).__name__}")
        return tally

    def _resolve_fallback(
        self, session: StorageSession, user_id: int, tally: ImportTally
    ) -> Tuple[int, ImportTally]:
        """Return the fallback category id, creating it at most once."""
        if tally.fallback_category_id is not None:
            return tally.fallback_category_id, tally

        existing = session.find_category(user_id, self.fallback_name, parent_id=None)
        if existing is not None:
            return existing.id, replace(tally, fallback_category_id=existing.id)

        category_id = session.create_category(
            name=self.fallback_name, user_id=user_id, parent_id=None, sort_order=0
        )
        self.logger.debug(f"Created fallback category {category_id} for user {user_id}")
        return category_id, replace(
            tally,
            categories=tally.categories + 1,
            fallback_category_id=category_id,
        )


def _sort_key(add_date) -> float:
    return add_date if add_date is not None else 0
