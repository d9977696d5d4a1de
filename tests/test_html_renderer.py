"""
Tests for the bookmark HTML export renderer.
"""

from datetime import datetime, timedelta

from bs4 import BeautifulSoup

from bookmark_interchange.config.pydantic_config import ExportConfig
from bookmark_interchange.core.data_models import Category, FolderNode, Link, LinkNode
from bookmark_interchange.core.html_renderer import (
    BookmarkExportRenderer,
    build_filename,
    build_tree,
    escape_attr,
    escape_html,
    to_epoch,
)
from tests.fixtures.test_data import FIXED_NOW, PNG_DATA_URL


def make_category(id, name, parent_id=None, sort_order=0):
    return Category(id=id, name=name, parent_id=parent_id, user_id=1, sort_order=sort_order)


def make_link(id, title, category_id, url=None):
    return Link(id=id, title=title, url=url or f"https://{id}.example", category_id=category_id, user_id=1)


class TestHelpers:
    """Tests for escaping and naming helpers."""

    def test_escape_html(self):
        assert escape_html("Tom & Jerry <3") == "Tom &amp; Jerry &lt;3"
        assert escape_html("\"quoted\" 'single'") == "&quot;quoted&quot; &#39;single&#39;"
        assert escape_html(None) == ""

    def test_escape_attr_handles_backtick(self):
        assert escape_attr("a`b&c") == "a&#96;b&amp;c"

    def test_build_filename(self):
        assert build_filename(datetime(2024, 3, 5)) == "bookmarks_2024_03_05.html"

    def test_to_epoch_uses_default(self):
        assert to_epoch(None, FIXED_NOW) == int(FIXED_NOW.timestamp())
        earlier = FIXED_NOW - timedelta(days=1)
        assert to_epoch(earlier, FIXED_NOW) == int(earlier.timestamp())


class TestBuildTree:
    """Tests for rebuilding the category forest."""

    def test_nesting_and_links(self):
        categories = [make_category(1, "Root"), make_category(2, "Child", parent_id=1)]
        links = [make_link(10, "A", 1), make_link(11, "B", 2)]

        (root,) = build_tree(categories, links)

        assert root.category.name == "Root"
        assert [link.title for link in root.links] == ["A"]
        (child,) = root.children
        assert [link.title for link in child.links] == ["B"]

    def test_unknown_parent_becomes_root(self):
        roots = build_tree([make_category(2, "Orphan", parent_id=99)], [])

        assert [node.category.name for node in roots] == ["Orphan"]

    def test_links_without_category_dropped(self):
        (root,) = build_tree([make_category(1, "Root")], [make_link(10, "Lost", 42)])

        assert root.links == []

    def test_sibling_order_follows_input(self):
        categories = [make_category(3, "c"), make_category(1, "a"), make_category(2, "b")]

        assert [n.category.name for n in build_tree(categories, [])] == ["c", "a", "b"]


class TestBookmarkExportRenderer:
    """Tests for full exports."""

    def test_empty_export_is_valid_document(self, exporter):
        result = exporter.export(1, now=FIXED_NOW)

        assert result.filename == "bookmarks_2024_03_05.html"
        assert result.content.startswith("<!DOCTYPE NETSCAPE-Bookmark-file-1>")
        assert "<TITLE>Bookmarks</TITLE>" in result.content
        assert 'PERSONAL_TOOLBAR_FOLDER="true">Bookmarks bar</H3>' in result.content
        assert result.content.count("<DL><p>") == result.content.count("</DL><p>") == 2

    def test_escaping_in_titles(self, importer, exporter):
        importer.import_tree(
            1,
            [FolderNode(title="A & B", children=(LinkNode(title="Tom & Jerry <3", url="https://a.com/?x=1&y=2"),))],
        )

        content = exporter.export(1, now=FIXED_NOW).content

        assert ">Tom &amp; Jerry &lt;3</A>" in content
        assert ">A &amp; B</H3>" in content
        assert 'HREF="https://a.com/?x=1&amp;y=2"' in content

    def test_timestamps_come_from_rows(self, importer, exporter):
        importer.import_tree(1, [FolderNode(title="F", children=(LinkNode(title="A", url="https://a.com"),))])

        content = exporter.export(1, now=FIXED_NOW + timedelta(days=10)).content

        stamp = int(FIXED_NOW.timestamp())
        assert f'<H3 ADD_DATE="{stamp}" LAST_MODIFIED="{stamp}">F</H3>' in content
        assert f'ADD_DATE="{stamp}">A</A>' in content

    def test_links_precede_subfolders(self, importer, exporter):
        importer.import_tree(
            1,
            [
                FolderNode(
                    title="Parent",
                    children=(
                        FolderNode(title="Child"),
                        LinkNode(title="Link", url="https://l.com"),
                    ),
                )
            ],
        )

        content = exporter.export(1, now=FIXED_NOW).content

        assert content.index(">Link</A>") < content.index(">Child</H3>")

    def test_indentation_reflects_depth(self, importer, exporter):
        importer.import_tree(
            1, [FolderNode(title="Top", children=(LinkNode(title="A", url="https://a.com"),))]
        )

        lines = exporter.export(1, now=FIXED_NOW).content.splitlines()

        assert any(line.startswith("        <DT><H3 ") and "Top" in line for line in lines)
        assert any(line.startswith("            <DT><A ") for line in lines)

    def test_stored_icons_are_inlined(self, importer, exporter):
        importer.import_tree(1, [LinkNode(title="A", url="https://a.com", icon=PNG_DATA_URL)])

        content = exporter.export(1, now=FIXED_NOW).content

        assert f'ICON="{PNG_DATA_URL}"' in content

    def test_unreadable_icon_keeps_reference(self, importer, exporter, icon_config):
        importer.import_tree(1, [LinkNode(title="A", url="https://a.com", icon=PNG_DATA_URL)])
        for path in (icon_config.upload_root / "linkicons").iterdir():
            path.unlink()

        content = exporter.export(1, now=FIXED_NOW).content

        assert 'ICON="/uploads/linkicons/' in content

    def test_link_without_icon_has_no_icon_attribute(self, importer, exporter):
        importer.import_tree(1, [LinkNode(title="A", url="https://a.com")])

        assert "ICON=" not in exporter.export(1, now=FIXED_NOW).content

    def test_export_order_follows_sort_order(self, importer, exporter, db):
        importer.import_tree(
            1,
            [
                FolderNode(
                    title="F",
                    children=tuple(
                        LinkNode(title=f"L{d}", url=f"https://{d}.com", add_date=d)
                        for d in (30, 10, 20)
                    ),
                )
            ],
        )

        soup = BeautifulSoup(exporter.export(1, now=FIXED_NOW).content, "html.parser")

        exported = [a.get_text() for a in soup.find_all("a")]
        assert exported == [link.title for link in db.list_links(1)]
        assert exported == ["L10", "L20", "L30"]

    def test_only_requested_user_exported(self, importer, exporter):
        importer.import_tree(1, [LinkNode(title="Mine", url="https://mine.com")])
        importer.import_tree(2, [LinkNode(title="Theirs", url="https://theirs.com")])

        content = exporter.export(1, now=FIXED_NOW).content

        assert "Mine" in content
        assert "Theirs" not in content

    def test_document_title_and_locale(self, db, icon_store):
        exporter = BookmarkExportRenderer(
            db, icon_store, config=ExportConfig(document_title="My <Links>"), locale="zh"
        )

        content = exporter.export(1, now=FIXED_NOW).content

        assert "<H1>My &lt;Links&gt;</H1>" in content
        assert ">书签栏</H3>" in content

    def test_default_now_is_local_time(self, exporter):
        result = exporter.export(1)

        assert result.filename == build_filename(datetime.now().astimezone())

    def test_parseable_structure(self, importer, exporter, sample_html):
        importer.import_html(1, sample_html)

        soup = BeautifulSoup(exporter.export(1, now=FIXED_NOW).content, "html.parser")

        headers = [h3.get_text() for h3 in soup.find_all("h3")]
        assert headers[0] == "Bookmarks bar"
        assert set(headers[1:]) == {"Work", "Tools", "Imported Bookmarks"}
        hrefs = {a["href"] for a in soup.find_all("a")}
        assert hrefs == {
            "https://docs.example.com",
            "https://ci.example.com",
            "https://news.example.com",
        }
