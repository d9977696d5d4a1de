"""
Content-addressed icon storage.

Icons arrive as ``data:`` URLs inside bookmark files, as direct uploads, or
as remote URLs in seed data. Their bytes are written once under
``<upload_root>/<icon_dir>/<hash>.<ext>`` and referenced by a stable public
URL. Identical bytes always map to the identical file.
"""

import base64
import binascii
import hashlib
import logging
import posixpath
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import requests

from ..config.pydantic_config import IconStoreConfig
from ..utils.error_handler import InvalidIconUploadError, StorageError
from ..utils.localization import DEFAULT_LOCALE, get_message

MIME_TO_EXTENSION = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/svg+xml": "svg",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
    "image/webp": "webp",
    "image/avif": "avif",
}

EXTENSION_TO_MIME = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "avif": "image/avif",
}

DEFAULT_EXTENSION = "png"
DEFAULT_MIME = "application/octet-stream"
BASE64_MARKER = ";base64,"


def extension_for_mime(mime: Optional[str]) -> str:
    """Map a MIME type (parameters ignored) to a file extension."""
    normalized = (mime or "").split(";")[0].strip().lower()
    return MIME_TO_EXTENSION.get(normalized, DEFAULT_EXTENSION)


def mime_for_extension(ext: str) -> str:
    """Map a file extension (with or without dot) to a MIME type."""
    return EXTENSION_TO_MIME.get(ext.lower().lstrip("."), DEFAULT_MIME)


class IconAssetStore:
    """
    Stores icon bytes under content-derived file names.

    Example:
        >>> store = IconAssetStore(IconStoreConfig(upload_root=Path("uploads")))
        >>> store.persist("data:image/png;base64,iVBORw0KGgo=")
        '/uploads/linkicons/<sha256>.png'
    """

    def __init__(self, config: IconStoreConfig, locale: str = DEFAULT_LOCALE):
        """
        Initialize the icon store.

        Args:
            config: Icon storage settings
            locale: Language for upload error messages
        """
        self.config = config
        self.locale = locale
        self.logger = logging.getLogger(__name__)

    @property
    def icon_root(self) -> Path:
        """Directory icon files are written to."""
        return Path(self.config.upload_root) / self.config.icon_dir

    def public_url(self, filename: str) -> str:
        """Public URL of a stored icon file."""
        return posixpath.join(self.config.public_prefix, self.config.icon_dir, filename)

    # ============ Write side ============

    def persist(self, icon_ref: Optional[str]) -> Optional[str]:
        """
        Resolve an icon reference from an imported bookmark.

        Args:
            icon_ref: Raw ``ICON`` value (data URL, path or external URL)

        Returns:
            None for no icon, the stored URL for a decodable data URL, and
            the original string for everything else

        Raises:
            StorageError: If the decoded icon cannot be written
        """
        if icon_ref is None or not icon_ref.strip():
            return None

        if not icon_ref.startswith("data:"):
            return icon_ref

        marker = icon_ref.find(BASE64_MARKER)
        if marker < 0:
            self.logger.debug("Data URL without base64 payload, keeping as-is")
            return icon_ref

        mime = icon_ref[len("data:"):marker]
        payload = "".join(icon_ref[marker + len(BASE64_MARKER):].split())
        if not payload:
            return icon_ref
        payload += "=" * (-len(payload) % 4)

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            self.logger.debug("Undecodable base64 icon payload, keeping as-is")
            return icon_ref

        if not data:
            return icon_ref

        return self.store_bytes(data, mime)

    def store_bytes(self, data: bytes, mime: Optional[str]) -> str:
        """
        Write icon bytes if absent and return their public URL.

        Args:
            data: Icon bytes
            mime: MIME type used to choose the file extension

        Returns:
            Public URL of the stored file

        Raises:
            StorageError: On any write failure other than "file exists"
        """
        digest = hashlib.new(self.config.hash_algorithm, data).hexdigest()
        filename = f"{digest}.{extension_for_mime(mime)}"
        target = self.icon_root / filename

        try:
            self.icon_root.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as f:
                f.write(data)
            self.logger.debug(f"Stored icon {filename} ({len(data)} bytes)")
        except FileExistsError:
            self.logger.debug(f"Icon {filename} already stored")
        except OSError as e:
            raise StorageError(f"Failed to store icon {filename}: {e}") from e

        return self.public_url(filename)

    def upload_icon(self, data: Optional[bytes], mime: Optional[str]) -> str:
        """
        Store a directly uploaded icon image.

        Args:
            data: Uploaded bytes
            mime: Declared MIME type

        Returns:
            Public URL of the stored file

        Raises:
            InvalidIconUploadError: If empty, not an image, or too large
            StorageError: On write failure
        """
        if not data:
            raise InvalidIconUploadError(get_message("icon_empty", self.locale))
        if not (mime or "").lower().startswith("image/"):
            raise InvalidIconUploadError(get_message("icon_not_image", self.locale))
        if len(data) > self.config.max_upload_bytes:
            raise InvalidIconUploadError(
                get_message(
                    "icon_too_large", self.locale, limit=self.config.max_upload_bytes
                )
            )
        return self.store_bytes(data, mime)

    def fetch_remote(
        self, icon_url: Optional[str], session: Optional[requests.Session] = None
    ) -> Optional[str]:
        """
        Download a remote icon into the store.

        Local upload paths are normalized to a leading slash and other
        non-HTTP strings pass through. Download failures keep the original
        URL.

        Args:
            icon_url: Icon reference from seed data
            session: Optional requests session to reuse

        Returns:
            Stored URL, normalized local path, or the original string
        """
        if icon_url is None or not icon_url.strip():
            return None

        icon_url = icon_url.strip()
        if icon_url.startswith("data:"):
            return self.persist(icon_url)

        if not icon_url.startswith(("http://", "https://")):
            if self._local_relative_path(icon_url) is not None:
                return "/" + icon_url.lstrip("/")
            return icon_url

        http = session or requests
        try:
            response = http.get(icon_url, timeout=self.config.fetch_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.warning(f"Failed to fetch icon {icon_url}: {e}")
            return icon_url

        content_type = response.headers.get("content-type")
        mime = content_type.split(";")[0].strip().lower() if content_type else None
        if mime not in MIME_TO_EXTENSION:
            url_ext = PurePosixPath(urlparse(icon_url).path).suffix.lstrip(".").lower()
            if url_ext in EXTENSION_TO_MIME:
                mime = EXTENSION_TO_MIME[url_ext]

        return self.store_bytes(response.content, mime)

    # ============ Read side ============

    def _local_relative_path(self, icon_ref: str) -> Optional[str]:
        """Return the path below the upload root for local references."""
        cleaned = icon_ref.lstrip("/")
        prefix = self.config.public_prefix.strip("/") + "/"
        if not cleaned.startswith(prefix):
            return None
        return cleaned[len(prefix):]

    def to_data_url(self, icon_ref: str) -> str:
        """
        Inline a locally stored icon as a ``data:`` URL.

        Args:
            icon_ref: Stored icon reference

        Returns:
            A data URL for readable local files; the original reference for
            data URLs, remote URLs and unreadable files
        """
        if icon_ref.startswith("data:"):
            return icon_ref

        relative = self._local_relative_path(icon_ref)
        if relative is None:
            return icon_ref

        parts = [part for part in PurePosixPath(relative).parts if part not in ("", ".")]
        if not parts or ".." in parts:
            return icon_ref

        full_path = Path(self.config.upload_root).joinpath(*parts)
        try:
            data = full_path.read_bytes()
        except OSError as e:
            self.logger.warning(f"Could not read icon {full_path}: {e}")
            return icon_ref

        mime = mime_for_extension(full_path.suffix)
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
