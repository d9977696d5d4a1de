"""
Database-backed category/link storage.

Provides the ``categories`` and ``links`` tables the importer writes and the
exporter reads, plus a transaction context that makes a whole import one
atomic unit of work.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator, List, Optional, Union

from ..utils.error_handler import StorageError
from .data_models import Category, Link


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageSession:
    """
    Write operations available inside one transaction.

    Instances are only created by ``BookmarkDatabase.transaction()`` and
    must not outlive it.
    """

    def __init__(self, conn: sqlite3.Connection, clock: Callable[[], datetime]):
        self._conn = conn
        self._clock = clock

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def create_category(
        self,
        name: str,
        user_id: Optional[int],
        parent_id: Optional[int] = None,
        sort_order: float = 0,
        is_public: bool = False,
        icon: Optional[str] = None,
    ) -> int:
        """Insert a category and return its id."""
        now = self._timestamp()
        cursor = self._conn.execute(
            """
            INSERT INTO categories
                (name, parent_id, user_id, sort_order, is_public, icon, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (name, parent_id, user_id, sort_order, int(is_public), icon, now, now),
        )
        return cursor.lastrowid

    def create_link(
        self,
        title: str,
        url: str,
        category_id: int,
        user_id: Optional[int],
        sort_order: float = 0,
        description: Optional[str] = None,
        icon: Optional[str] = None,
        cover: Optional[str] = None,
    ) -> int:
        """Insert a link and return its id."""
        now = self._timestamp()
        cursor = self._conn.execute(
            """
            INSERT INTO links
                (title, url, description, icon, cover, sort_order,
                 category_id, user_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (title, url, description, icon, cover, sort_order,
             category_id, user_id, now, now),
        )
        return cursor.lastrowid

    def find_category(
        self,
        user_id: Optional[int],
        name: str,
        parent_id: Optional[int] = None,
        is_public: Optional[bool] = None,
    ) -> Optional[Category]:
        """
        Find the first category with this owner, name and parent.

        ``None`` for ``user_id`` or ``parent_id`` matches NULL. ``is_public``
        filters only when given.
        """
        query = (
            "SELECT * FROM categories "
            "WHERE user_id IS ? AND name = ? AND parent_id IS ?"
        )
        params: list = [user_id, name, parent_id]
        if is_public is not None:
            query += " AND is_public = ?"
            params.append(int(is_public))
        query += " ORDER BY id LIMIT 1"

        row = self._conn.execute(query, params).fetchone()
        return Category.from_row(row) if row else None

    def find_link(
        self, user_id: Optional[int], category_id: int, url: str
    ) -> Optional[Link]:
        """Find the first link with this owner and URL in a category."""
        row = self._conn.execute(
            """
            SELECT * FROM links
            WHERE user_id IS ? AND category_id = ? AND url = ?
            ORDER BY id LIMIT 1
            """,
            (user_id, category_id, url),
        ).fetchone()
        return Link.from_row(row) if row else None

    def update_link_icon(self, link_id: int, icon: Optional[str]) -> None:
        """Replace a link's icon reference."""
        self._conn.execute(
            "UPDATE links SET icon = ?, updated_at = ? WHERE id = ?",
            (icon, self._timestamp(), link_id),
        )


class BookmarkDatabase:
    """
    SQLite storage for categories and links.

    Example:
        >>> db = BookmarkDatabase(Path("bookmarks.db"))
        >>> with db.transaction() as session:
        ...     category_id = session.create_category("Work", user_id=1)
        ...     session.create_link("Docs", "https://docs.example", category_id, 1)
        >>> [c.name for c in db.list_categories(1)]
        ['Work']
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        parent_id INTEGER REFERENCES categories(id) ON DELETE CASCADE,
        user_id INTEGER,
        sort_order NUMERIC NOT NULL DEFAULT 0,
        is_public INTEGER NOT NULL DEFAULT 0,
        icon TEXT,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    );

    CREATE TABLE IF NOT EXISTS links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        url TEXT NOT NULL,
        description TEXT,
        icon TEXT,
        cover TEXT,
        sort_order NUMERIC NOT NULL DEFAULT 0,
        category_id INTEGER NOT NULL REFERENCES categories(id) ON DELETE CASCADE,
        user_id INTEGER,
        view_count INTEGER NOT NULL DEFAULT 0,
        like_count INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_categories_user ON categories(user_id, parent_id, name);
    CREATE INDEX IF NOT EXISTS idx_categories_order ON categories(user_id, sort_order, id);
    CREATE INDEX IF NOT EXISTS idx_links_category ON links(category_id, sort_order, id);
    CREATE INDEX IF NOT EXISTS idx_links_user ON links(user_id);
    """

    def __init__(
        self,
        db_path: Union[str, Path] = Path("bookmarks.db"),
        busy_timeout: float = 30.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the bookmark database.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait for another writer's lock
            clock: Source of row timestamps (defaults to UTC now)
        """
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.clock = clock or _utc_now
        self.logger = logging.getLogger(__name__)
        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._get_connection() as conn:
                conn.executescript(self.SCHEMA)
            self.logger.debug(f"Database initialized at {self.db_path}")
        except (OSError, sqlite3.Error) as e:
            self.logger.error(f"Failed to initialize database: {e}")
            raise StorageError(f"Failed to initialize database: {e}") from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection with explicit transaction control."""
        conn = None
        try:
            conn = sqlite3.connect(
                str(self.db_path), timeout=self.busy_timeout, isolation_level=None
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        finally:
            if conn:
                conn.close()

    @contextmanager
    def transaction(self) -> Generator[StorageSession, None, None]:
        """
        Run a block of writes as one atomic unit.

        The transaction is opened with ``BEGIN IMMEDIATE`` so the write lock
        is held from the first statement; lookups made inside the block are
        not raced by other writers. Any exception rolls everything back.

        Yields:
            StorageSession bound to the open transaction

        Raises:
            StorageError: If the database fails; the original error is chained
        """
        try:
            with self._get_connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    yield StorageSession(conn, self.clock)
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    self.logger.debug("Transaction rolled back")
                    raise
                conn.execute("COMMIT")
        except sqlite3.Error as e:
            self.logger.error(f"Database transaction failed: {e}")
            raise StorageError(f"Database transaction failed: {e}") from e

    # ============ Query Methods ============

    def list_categories(self, user_id: Optional[int]) -> List[Category]:
        """
        List a user's categories ordered by ``(sort_order, id)``.

        Args:
            user_id: Owner id; None lists public default content

        Returns:
            List of Category objects
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM categories WHERE user_id IS ? ORDER BY sort_order, id",
                (user_id,),
            )
            return [Category.from_row(row) for row in cursor.fetchall()]

    def list_links(self, user_id: Optional[int]) -> List[Link]:
        """
        List a user's links ordered by ``(sort_order, id)``.

        Args:
            user_id: Owner id; None lists public default content

        Returns:
            List of Link objects
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM links WHERE user_id IS ? ORDER BY sort_order, id",
                (user_id,),
            )
            return [Link.from_row(row) for row in cursor.fetchall()]

    def count_categories(self, user_id: Optional[int]) -> int:
        """Count a user's categories."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM categories WHERE user_id IS ?", (user_id,)
            ).fetchone()
            return row[0]

    def count_links(self, user_id: Optional[int]) -> int:
        """Count a user's links."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM links WHERE user_id IS ?", (user_id,)
            ).fetchone()
            return row[0]
