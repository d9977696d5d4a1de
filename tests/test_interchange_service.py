"""
Tests for the service facade.
"""

import json

import pytest

from bookmark_interchange.config.pydantic_config import (
    IconStoreConfig,
    InterchangeConfig,
    StorageConfig,
)
from bookmark_interchange.core.interchange_service import BookmarkInterchangeService
from bookmark_interchange.utils.error_handler import InvalidIconUploadError
from tests.fixtures.test_data import FIXED_NOW, PNG_BYTES, SAMPLE_JSON_TREE


@pytest.fixture
def service(tmp_path):
    """Create a service writing below tmp_path."""
    config = InterchangeConfig(
        storage=StorageConfig(db_path=tmp_path / "b.db"),
        icons=IconStoreConfig(upload_root=tmp_path / "uploads"),
    )
    return BookmarkInterchangeService(config)


class TestBookmarkInterchangeService:
    """Tests for BookmarkInterchangeService."""

    def test_import_and_export(self, service):
        result = service.import_bookmarks(3, json.dumps(SAMPLE_JSON_TREE).encode("utf-8"))
        export = service.export_bookmarks(3, now=FIXED_NOW)

        assert result.imported_links == 4
        assert export.filename == "bookmarks_2024_03_05.html"
        assert "https://python.org" in export.content

    @pytest.mark.parametrize("suffix", [".json", ".JSON"])
    def test_import_file_format_from_suffix(self, service, tmp_path, suffix):
        path = tmp_path / f"tree{suffix}"
        path.write_text(json.dumps(SAMPLE_JSON_TREE), encoding="utf-8")

        assert service.import_file(3, path).imported_categories == 3

    def test_import_file_html(self, service, tmp_path, sample_html):
        path = tmp_path / "bookmarks.htm"
        path.write_text(sample_html, encoding="utf-8")

        assert service.import_file(3, str(path)).imported_links == 3

    def test_upload_icon(self, service):
        assert service.upload_icon(PNG_BYTES, "image/png").startswith("/uploads/linkicons/")

        with pytest.raises(InvalidIconUploadError):
            service.upload_icon(PNG_BYTES, "text/plain")

    def test_locale_flows_to_components(self, tmp_path):
        service = BookmarkInterchangeService(
            InterchangeConfig(
                locale="zh",
                storage=StorageConfig(db_path=tmp_path / "b.db"),
                icons=IconStoreConfig(upload_root=tmp_path / "uploads"),
            )
        )

        assert service.importer.fallback_name == "导入的书签"
        assert service.exporter.locale == "zh"

    def test_seeder_is_lazy(self, service):
        assert service._seeder is None
        assert service.seeder is service.seeder
