"""
Error hierarchy for the Bookmark Interchange Engine.

All custom exceptions for the project are defined here. Every error carries
an HTTP-style ``status_code`` so a transport layer can map it to a response
without knowing the taxonomy: client errors are 400, server errors are 500.
"""

from typing import Optional


# ============================================================================
# Unified Exception Hierarchy
# ============================================================================
# Import these exceptions from bookmark_interchange.utils.error_handler
# ============================================================================


class BookmarkInterchangeError(Exception):
    """Base exception for all bookmark interchange errors."""

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)


# ============================================================================
# Input Errors (client side, raised before any persistence)
# ============================================================================


class InvalidInputError(BookmarkInterchangeError):
    """Input could not be turned into a canonical bookmark tree."""

    status_code = 400


class InvalidFormatError(InvalidInputError):
    """Unparseable JSON or an unsupported top-level shape."""

    pass


class MissingTypeError(InvalidInputError):
    """A JSON node without a recognised ``type`` tag."""

    pass


class MissingUrlError(InvalidInputError):
    """A JSON link node without a usable ``url``."""

    pass


class InvalidIconUploadError(InvalidInputError):
    """An uploaded icon that is empty, not an image, or too large."""

    pass


class EmptyContentError(BookmarkInterchangeError):
    """A structurally valid tree with nothing in it."""

    status_code = 400


# ============================================================================
# Server Errors
# ============================================================================


class StorageError(BookmarkInterchangeError):
    """Database or filesystem write failure; the import is rolled back."""

    status_code = 500


class ConfigurationError(BookmarkInterchangeError):
    """Configuration-related errors."""

    status_code = 500
