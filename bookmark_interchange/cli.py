"""
Command-line interface for the Bookmark Interchange Engine.

Imports Netscape bookmark HTML or JSON trees into a user's categories,
exports them back to bookmark HTML, seeds public default content and writes
sample configuration files.
"""

import argparse
import logging
import sys
from pathlib import Path

from bookmark_interchange import __version__
from bookmark_interchange.config.pydantic_config import ConfigurationManager
from bookmark_interchange.core.interchange_service import BookmarkInterchangeService
from bookmark_interchange.utils.error_handler import (
    BookmarkInterchangeError,
    EmptyContentError,
    InvalidInputError,
)
from bookmark_interchange.utils.logging_setup import setup_logging


class CLIInterface:
    """Command line interface for bookmark import and export."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="bookmark-interchange",
            description="Import and export bookmark collections",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  bookmark-interchange import --user-id 1 chrome_bookmarks.html
  bookmark-interchange import --user-id 1 tree.json --format json
  bookmark-interchange export --user-id 1 --output my_bookmarks.html
  bookmark-interchange seed init_default_link.json
  bookmark-interchange create-config bookmark_interchange.toml
            """,
        )

        parser.add_argument(
            "--version", "-V", action="version", version=f"%(prog)s {__version__}"
        )
        parser.add_argument(
            "--config",
            "-c",
            help="Configuration file path (TOML or JSON format). If not "
            "specified, looks for bookmark_interchange.toml/.json in the "
            "current directory.",
        )
        parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Enable debug logging",
        )
        parser.add_argument(
            "--log-file",
            help="Also write log output to this file",
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        import_parser = subparsers.add_parser(
            "import", help="Import a bookmark file for a user"
        )
        import_parser.add_argument("input", help="Bookmark HTML or JSON file")
        import_parser.add_argument(
            "--user-id", "-u", type=int, required=True, help="Importing user id"
        )
        import_parser.add_argument(
            "--format",
            "-f",
            choices=["html", "json"],
            help="Input format (detected from the file when omitted)",
        )

        export_parser = subparsers.add_parser(
            "export", help="Export a user's bookmarks as HTML"
        )
        export_parser.add_argument(
            "--user-id", "-u", type=int, required=True, help="Exporting user id"
        )
        export_parser.add_argument(
            "--output",
            "-o",
            help="Output path (defaults to bookmarks_<yyyy>_<mm>_<dd>.html)",
        )

        seed_parser = subparsers.add_parser(
            "seed", help="Seed public default content from a JSON file"
        )
        seed_parser.add_argument("input", help="JSON array of folder nodes")

        config_parser = subparsers.add_parser(
            "create-config", help="Write a sample configuration file"
        )
        config_parser.add_argument("output", help="Target path (.toml or .json)")

        return parser

    def parse_args(self, args=None) -> argparse.Namespace:
        """Parse command line arguments."""
        return self.parser.parse_args(args)

    def _handle_create_config(self, output: str) -> int:
        output_path = Path(output)
        fmt = "json" if output_path.suffix.lower() == ".json" else "toml"
        ConfigurationManager.create_sample_config(output_path, format=fmt)
        print(f"Configuration written to {output_path}")
        return 0

    def run(self, args=None) -> int:
        """Execute CLI interface."""
        parsed_args = self.parse_args(args)

        setup_logging(
            level="DEBUG" if parsed_args.verbose else "INFO",
            log_file=parsed_args.log_file,
        )
        logger = logging.getLogger(__name__)

        try:
            if parsed_args.command == "create-config":
                return self._handle_create_config(parsed_args.output)

            manager = ConfigurationManager(
                Path(parsed_args.config) if parsed_args.config else None
            )
            service = BookmarkInterchangeService(manager.config)

            if parsed_args.command == "import":
                result = service.import_file(
                    parsed_args.user_id, parsed_args.input, parsed_args.format
                )
                print(
                    f"Imported {result.imported_categories} categories and "
                    f"{result.imported_links} links"
                )
            elif parsed_args.command == "export":
                result = service.export_bookmarks(parsed_args.user_id)
                output_path = Path(parsed_args.output or result.filename)
                output_path.write_text(result.content, encoding="utf-8")
                print(f"Exported bookmarks to {output_path}")
            elif parsed_args.command == "seed":
                result = service.seed_defaults(parsed_args.input)
                print(
                    f"Seeded {result.imported_categories} categories and "
                    f"{result.imported_links} links"
                )
            return 0

        except (InvalidInputError, EmptyContentError) as e:
            print(f"Invalid input: {e}", file=sys.stderr)
            return 2
        except BookmarkInterchangeError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            logger.debug("File access failed", exc_info=True)
            return 1


def main(args=None):
    """Main entry point for the CLI."""
    cli = CLIInterface()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
