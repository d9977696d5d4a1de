"""
Data models for the Bookmark Interchange Engine.

Two families live here: the transient canonical tree (``FolderNode`` and
``LinkNode``) that both import formats are parsed into, and the persisted
``Category``/``Link`` rows the tree is written to and exported from.
"""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

Timestamp = Union[int, float]


# ============================================================================
# Canonical bookmark tree
# ============================================================================


@dataclass(frozen=True)
class LinkNode:
    """A bookmark leaf."""

    title: str
    url: str
    add_date: Optional[Timestamp] = None
    icon: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class FolderNode:
    """A bookmark folder; ``children`` keep source order."""

    title: str
    add_date: Optional[Timestamp] = None
    last_modified: Optional[Timestamp] = None
    children: Tuple["BookmarkNode", ...] = ()


BookmarkNode = Union[FolderNode, LinkNode]


def count_nodes(nodes) -> Tuple[int, int]:
    """Return ``(folders, links)`` in a forest."""
    folders = links = 0
    for node in nodes:
        if isinstance(node, FolderNode):
            sub_folders, sub_links = count_nodes(node.children)
            folders += 1 + sub_folders
            links += sub_links
        elif isinstance(node, LinkNode):
            links += 1
        else:
            raise TypeError(f"Unsupported bookmark node: {type(node).__name__}")
    return folders, links


# ============================================================================
# Persisted rows
# ============================================================================


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp, treating naive values as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Category:
    """Represents a row of the ``categories`` table."""

    id: int
    name: str
    parent_id: Optional[int]
    user_id: Optional[int]
    sort_order: float = 0
    is_public: bool = False
    icon: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Category":
        """Create from database row."""
        return cls(
            id=row["id"],
            name=row["name"],
            parent_id=row["parent_id"],
            user_id=row["user_id"],
            sort_order=row["sort_order"],
            is_public=bool(row["is_public"]),
            icon=row["icon"],
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


@dataclass
class Link:
    """Represents a row of the ``links`` table."""

    id: int
    title: str
    url: str
    category_id: int
    user_id: Optional[int]
    description: Optional[str] = None
    icon: Optional[str] = None
    cover: Optional[str] = None
    sort_order: float = 0
    view_count: int = 0
    like_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Link":
        """Create from database row."""
        return cls(
            id=row["id"],
            title=row["title"],
            url=row["url"],
            category_id=row["category_id"],
            user_id=row["user_id"],
            description=row["description"],
            icon=row["icon"],
            cover=row["cover"],
            sort_order=row["sort_order"],
            view_count=row["view_count"] or 0,
            like_count=row["like_count"] or 0,
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


@dataclass
class CategoryNode:
    """A category with its child categories and links, rebuilt for export."""

    category: Category
    children: List["CategoryNode"] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)


# ============================================================================
# Operation results
# ============================================================================


@dataclass(frozen=True)
class ImportResult:
    """Counts of rows created by one import."""

    imported_categories: int = 0
    imported_links: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape used by the HTTP layer."""
        return {
            "importedCategories": self.imported_categories,
            "importedLinks": self.imported_links,
        }


@dataclass(frozen=True)
class ExportResult:
    """A rendered bookmark file."""

    filename: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"filename": self.filename, "content": self.content}
