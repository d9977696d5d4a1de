"""
Bookmark HTML export renderer.

Rebuilds a user's category tree from storage and writes it out in the
Netscape-Bookmark-file-1 format, with locally stored icons inlined as
``data:`` URLs so the file is self-contained.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..config.pydantic_config import ExportConfig
from ..utils.localization import DEFAULT_LOCALE, get_label
from .data_models import Category, CategoryNode, ExportResult, Link
from .database import BookmarkDatabase
from .icon_store import IconAssetStore

INDENT = "    "

HEADER_LINES = (
    "<!DOCTYPE NETSCAPE-Bookmark-file-1>",
    "<!-- This is an automatically generated file.",
    "     It will be read and overwritten.",
    "     DO NOT EDIT! -->",
    '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">',
)


def escape_html(value: Optional[str]) -> str:
    """Escape text for HTML body content."""
    if not value:
        return ""
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def escape_attr(value: Optional[str]) -> str:
    """Escape text for a double-quoted HTML attribute value."""
    return escape_html(value).replace("`", "&#96;")


def to_epoch(value: Optional[datetime], default: datetime) -> int:
    """Convert a datetime to whole epoch seconds."""
    return int((value or default).timestamp())


def build_filename(now: datetime) -> str:
    """Export file name for the given local time."""
    return f"bookmarks_{now:%Y}_{now:%m}_{now:%d}.html"


def build_tree(categories: Iterable[Category], links: Iterable[Link]) -> List[CategoryNode]:
    """
    Rebuild the category forest.

    A category whose parent was loaded becomes that parent's child; any
    other category is a root. Input order is kept, so ordered queries give
    ordered siblings. Links whose category was not loaded are dropped.

    Args:
        categories: Categories ordered by ``(sort_order, id)``
        links: Links ordered by ``(sort_order, id)``

    Returns:
        Root category nodes
    """
    nodes = [CategoryNode(category=category) for category in categories]
    by_id: Dict[int, CategoryNode] = {node.category.id: node for node in nodes}

    for link in links:
        owner = by_id.get(link.category_id)
        if owner is not None:
            owner.links.append(link)

    roots = []
    for node in nodes:
        parent = by_id.get(node.category.parent_id) if node.category.parent_id else None
        if parent is not None and parent is not node:
            parent.children.append(node)
        else:
            roots.append(node)
    return roots


class BookmarkExportRenderer:
    """
    Exports a user's categories and links as bookmark HTML.

    Creates properly structured files that browsers import, following the
    Netscape-Bookmark-file-1 format.
    """

    def __init__(
        self,
        database: BookmarkDatabase,
        icon_store: IconAssetStore,
        config: Optional[ExportConfig] = None,
        locale: str = DEFAULT_LOCALE,
    ):
        """
        Initialize the export renderer.

        Args:
            database: Category/link storage
            icon_store: Store used to inline local icons
            config: Export settings
            locale: Language of the toolbar folder title
        """
        self.database = database
        self.icon_store = icon_store
        self.config = config or ExportConfig()
        self.locale = locale
        self.logger = logging.getLogger(__name__)

    def export(self, user_id: int, now: Optional[datetime] = None) -> ExportResult:
        """
        Export a user's bookmarks.

        Args:
            user_id: Owner whose categories are exported
            now: Export time (defaults to the current local time)

        Returns:
            ExportResult with the file name and HTML content
        """
        now = now or datetime.now().astimezone()

        categories = self.database.list_categories(user_id)
        links = self.database.list_links(user_id)
        tree = build_tree(categories, links)
        self.populate_icons(tree)

        content = self.render(tree, now)
        self.logger.info(
            f"Exported {len(categories)} categories and {len(links)} links "
            f"for user {user_id}"
        )
        return ExportResult(filename=build_filename(now), content=content)

    def populate_icons(self, tree: List[CategoryNode]) -> None:
        """Replace local icon references with data URLs, in parallel."""
        nodes = list(self._walk(tree))
        pending = [link for node in nodes for link in node.links if link.icon]
        if not pending:
            return

        with ThreadPoolExecutor(max_workers=self.config.icon_workers) as executor:
            resolved = dict(
                zip(
                    (link.id for link in pending),
                    executor.map(self.icon_store.to_data_url, (link.icon for link in pending)),
                )
            )

        for node in nodes:
            node.links = [
                replace(link, icon=resolved[link.id]) if link.id in resolved else link
                for link in node.links
            ]

    def _walk(self, nodes: List[CategoryNode]):
        for node in nodes:
            yield node
            yield from self._walk(node.children)

    def render(self, tree: List[CategoryNode], now: datetime) -> str:
        """
        Render the category forest as a bookmark document.

        Args:
            tree: Root category nodes
            now: Timestamp for the synthetic toolbar folder

        Returns:
            Complete HTML content as string
        """
        title = escape_html(self.config.document_title)
        stamp = to_epoch(now, now)
        bar_title = escape_html(get_label("bookmarks_bar", self.locale))

        lines = list(HEADER_LINES)
        lines.append(f"<TITLE>{title}</TITLE>")
        lines.append(f"<H1>{title}</H1>")
        lines.append("<DL><p>")
        lines.append(
            f'{INDENT}<DT><H3 ADD_DATE="{stamp}" LAST_MODIFIED="{stamp}" '
            f'PERSONAL_TOOLBAR_FOLDER="true">{bar_title}</H3>'
        )
        lines.append(f"{INDENT}<DL><p>")

        for node in tree:
            self._render_category(lines, node, 2, now)

        lines.append(f"{INDENT}</DL><p>")
        lines.append("</DL><p>")
        return "\n".join(lines)

    def _render_category(
        self, lines: List[str], node: CategoryNode, depth: int, now: datetime
    ) -> None:
        indent = INDENT * depth
        category = node.category
        add_date = to_epoch(category.created_at, now)
        last_modified = to_epoch(category.updated_at or category.created_at, now)

        lines.append(
            f'{indent}<DT><H3 ADD_DATE="{add_date}" LAST_MODIFIED="{last_modified}">'
            f"{escape_html(category.name)}</H3>"
        )
        lines.append(f"{indent}<DL><p>")

        for link in node.links:
            lines.append(self._render_link(link, depth + 1, now))

        for child in node.children:
            self._render_category(lines, child, depth + 1, now)

        lines.append(f"{indent}</DL><p>")

    def _render_link(self, link: Link, depth: int, now: datetime) -> str:
        attrs = [
            f'HREF="{escape_attr(link.url)}"',
            f'ADD_DATE="{to_epoch(link.created_at, now)}"',
        ]
        if link.icon:
            attrs.append(f'ICON="{escape_attr(link.icon)}"')
        return f"{INDENT * depth}<DT><A {' '.join(attrs)}>{escape_html(link.title)}</A>"
