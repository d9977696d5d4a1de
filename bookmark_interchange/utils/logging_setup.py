"""
Logging configuration for the Bookmark Interchange Engine.

This module sets up logging for the command-line front end. Library code
only ever asks for module loggers and never configures handlers itself.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console_output: bool = True,
) -> None:
    """
    Set up logging configuration.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional log file path; its directory is created if needed
        console_output: Also log to stderr
    """
    handlers = []
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"Log level: {level}")

    # Reduce noise from HTTP libraries used for icon downloads
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("chardet").setLevel(logging.WARNING)
