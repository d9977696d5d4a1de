"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
import toml

from bookmark_interchange.cli import CLIInterface, main
from tests.fixtures.test_data import SAMPLE_JSON_TREE


@pytest.fixture
def config_file(tmp_path):
    """A configuration file pointing storage at tmp_path."""
    path = tmp_path / "bookmark_interchange.toml"
    path.write_text(
        toml.dumps(
            {
                "storage": {"db_path": str(tmp_path / "b.db")},
                "icons": {"upload_root": str(tmp_path / "uploads")},
            }
        )
    )
    return path


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("bookmark_interchange.cli.setup_logging") as mock_setup:
        yield mock_setup


class TestCLIInterface:
    """Tests for CLIInterface."""

    def test_parse_import_args(self):
        args = CLIInterface().parse_args(["import", "--user-id", "4", "b.html", "-f", "html"])

        assert args.command == "import"
        assert args.user_id == 4
        assert args.input == "b.html"
        assert args.format == "html"

    def test_user_id_required(self):
        with pytest.raises(SystemExit):
            CLIInterface().parse_args(["export"])

    def test_import_then_export(self, tmp_path, config_file, capsys):
        tree = tmp_path / "tree.json"
        tree.write_text(json.dumps(SAMPLE_JSON_TREE), encoding="utf-8")
        output = tmp_path / "out.html"

        assert main(["-c", str(config_file), "import", "-u", "1", str(tree)]) == 0
        assert "Imported 3 categories and 4 links" in capsys.readouterr().out

        assert main(["-c", str(config_file), "export", "-u", "1", "-o", str(output)]) == 0
        assert "https://pypi.org" in output.read_text(encoding="utf-8")

    def test_export_default_filename(self, tmp_path, config_file, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert main(["-c", str(config_file), "export", "-u", "1"]) == 0
        assert len(list(tmp_path.glob("bookmarks_*.html"))) == 1

    def test_invalid_input_exit_code(self, tmp_path, config_file, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"children":[{"type":"link","title":"X"}]}', encoding="utf-8")

        assert main(["-c", str(config_file), "import", "-u", "1", str(bad)]) == 2
        assert "root[0]" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path, config_file, capsys):
        assert main(["-c", str(config_file), "import", "-u", "1", str(tmp_path / "nope.html")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_config(self, tmp_path, capsys):
        assert main(["-c", str(tmp_path / "missing.toml"), "export", "-u", "1"]) == 1
        assert "Configuration file not found" in capsys.readouterr().err

    def test_create_config(self, tmp_path):
        target = tmp_path / "sample.json"

        assert main(["create-config", str(target)]) == 0
        assert json.loads(target.read_text())["locale"] == "en"

    def test_seed(self, tmp_path, config_file, capsys):
        seed = tmp_path / "seed.json"
        seed.write_text(
            json.dumps([{"type": "folder", "title": "Public", "children": [
                {"type": "link", "title": "A", "url": "https://a.com"}
            ]}]),
            encoding="utf-8",
        )

        assert main(["-c", str(config_file), "seed", str(seed)]) == 0
        assert "Seeded 1 categories and 1 links" in capsys.readouterr().out

    def test_verbose_sets_debug(self, config_file, quiet_logging, tmp_path):
        main(["-v", "-c", str(config_file), "export", "-u", "1", "-o", str(tmp_path / "o.html")])

        assert quiet_logging.call_args.kwargs["level"] == "DEBUG"
