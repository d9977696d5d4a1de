"""
Utility modules for the Bookmark Interchange Engine.

Error hierarchy, logging setup and localized labels/messages.
"""

from .error_handler import (
    BookmarkInterchangeError,
    ConfigurationError,
    EmptyContentError,
    InvalidFormatError,
    InvalidIconUploadError,
    InvalidInputError,
    MissingTypeError,
    MissingUrlError,
    StorageError,
)
from .localization import get_label, get_message
from .logging_setup import setup_logging

__all__ = [
    "BookmarkInterchangeError",
    "ConfigurationError",
    "EmptyContentError",
    "InvalidFormatError",
    "InvalidIconUploadError",
    "InvalidInputError",
    "MissingTypeError",
    "MissingUrlError",
    "StorageError",
    "get_label",
    "get_message",
    "setup_logging",
]
