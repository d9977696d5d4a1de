"""
Pytest configuration and shared fixtures for bookmark interchange tests.

Every fixture writes below ``tmp_path`` so tests never touch the working
directory.
"""

import pytest

from bookmark_interchange.config.pydantic_config import ExportConfig, IconStoreConfig
from bookmark_interchange.core.bookmark_importer import BookmarkImportCoordinator
from bookmark_interchange.core.database import BookmarkDatabase
from bookmark_interchange.core.html_renderer import BookmarkExportRenderer
from bookmark_interchange.core.icon_store import IconAssetStore

from tests.fixtures.test_data import FIXED_NOW, PNG_DATA_URL


@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path."""
    return tmp_path / "test_bookmarks.db"


@pytest.fixture
def db(temp_db_path):
    """Create a BookmarkDatabase with a fixed clock."""
    return BookmarkDatabase(temp_db_path, clock=lambda: FIXED_NOW)


@pytest.fixture
def icon_config(tmp_path):
    """Icon settings rooted in the temporary directory."""
    return IconStoreConfig(upload_root=tmp_path / "uploads")


@pytest.fixture
def icon_store(icon_config):
    """Create an IconAssetStore."""
    return IconAssetStore(icon_config)


@pytest.fixture
def importer(db, icon_store):
    """Create a BookmarkImportCoordinator."""
    return BookmarkImportCoordinator(db, icon_store)


@pytest.fixture
def exporter(db, icon_store):
    """Create a BookmarkExportRenderer with a small icon pool."""
    return BookmarkExportRenderer(db, icon_store, config=ExportConfig(icon_workers=2))


@pytest.fixture
def sample_html():
    """A small browser export with nested folders, an icon and a loose link."""
    return f"""<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1700000000" LAST_MODIFIED="1700000100">Work</H3>
    <DL><p>
        <DT><A HREF="https://docs.example.com" ADD_DATE="1700000001" ICON="{PNG_DATA_URL}">Docs</A>
        <DT><H3 ADD_DATE="1700000002">Tools</H3>
        <DL><p>
            <DT><A HREF="https://ci.example.com">CI &amp; CD</A>
        </DL><p>
    </DL><p>
    <DT><A HREF="https://news.example.com">News</A>
</DL><p>
"""
