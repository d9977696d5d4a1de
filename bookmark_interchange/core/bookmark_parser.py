"""
Bookmark tree parser module.

Turns raw bookmark input into the canonical tree of ``FolderNode`` and
``LinkNode`` values. Two source formats are supported:

* Netscape bookmark HTML, as exported by every major browser. This branch is
  tolerant: malformed markup degrades, it never raises.
* A JSON tree of ``{"type": "folder"|"link", ...}`` nodes. This branch is
  strict about node types and link URLs and reports the offending position.

Both branches produce exactly the same node shape so the importer has a
single persistence path.
"""

import json
import logging
import math
from typing import Any, List, Optional, Union

import chardet

from ..utils.error_handler import InvalidFormatError, MissingTypeError, MissingUrlError
from ..utils.localization import DEFAULT_LOCALE, get_message
from .data_models import BookmarkNode, FolderNode, LinkNode, Timestamp
from .html_tokenizer import Token, TokenKind, decode_entities, tokenize

logger = logging.getLogger(__name__)

FORMAT_HTML = "html"
FORMAT_JSON = "json"

# Deepest folder level kept from an upload
MAX_FOLDER_DEPTH = 100


def coerce_timestamp(value: Any) -> Optional[Timestamp]:
    """
    Coerce a number or numeric string into epoch seconds.

    Args:
        value: Raw attribute or JSON value

    Returns:
        An int when the value is integral text, the number itself for
        numeric input, otherwise None (booleans and non-finite values too)
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class _FolderBuilder:
    """Mutable folder used while the stack machine runs."""

    def __init__(self, title: str, add_date=None, last_modified=None):
        self.title = title
        self.add_date = add_date
        self.last_modified = last_modified
        self.children: List[Union["_FolderBuilder", LinkNode]] = []

    def freeze(self) -> FolderNode:
        return FolderNode(
            title=self.title,
            add_date=self.add_date,
            last_modified=self.last_modified,
            children=tuple(
                child.freeze() if isinstance(child, _FolderBuilder) else child
                for child in self.children
            ),
        )


def build_tree(tokens) -> List[BookmarkNode]:
    """
    Fold a token stream into a bookmark forest.

    A folder header is attached to the current folder immediately but only
    becomes the current folder when the following ``<DL>`` opens it. Stray
    closes never pop the implicit root, and stray opens are ignored. Folders
    deeper than ``MAX_FOLDER_DEPTH`` are dropped and their contents land in
    the deepest allowed folder.

    Args:
        tokens: Iterable of Token values in document order

    Returns:
        The children of the implicit root, frozen
    """
    root = _FolderBuilder("root")
    stack = [root]
    pending: Optional[_FolderBuilder] = None
    pending_flattened = False
    flattened_lists = 0

    for token in tokens:
        if token.kind is TokenKind.FOLDER_HEADER:
            pending = None
            pending_flattened = False
            if len(stack) > MAX_FOLDER_DEPTH:
                logger.debug(
                    f"Flattening folder nested deeper than {MAX_FOLDER_DEPTH} "
                    f"at offset {token.position}"
                )
                pending_flattened = True
                continue
            folder = _FolderBuilder(
                title=decode_entities(token.text.strip()),
                add_date=coerce_timestamp(token.attrs.get("ADD_DATE")),
                last_modified=coerce_timestamp(token.attrs.get("LAST_MODIFIED")),
            )
            stack[-1].children.append(folder)
            pending = folder
        elif token.kind is TokenKind.FOLDER_OPEN:
            if pending is not None:
                stack.append(pending)
            elif pending_flattened:
                flattened_lists += 1
            pending = None
            pending_flattened = False
        elif token.kind is TokenKind.FOLDER_CLOSE:
            if flattened_lists:
                flattened_lists -= 1
            elif len(stack) > 1:
                stack.pop()
            pending = None
            pending_flattened = False
        elif token.kind is TokenKind.LEAF:
            link = _link_from_token(token)
            if link is not None:
                pending = None
                pending_flattened = False
                stack[-1].children.append(link)
        else:
            raise TypeError(f"Unsupported token kind: {token.kind!r}")

    return list(root.freeze().children)


def _link_from_token(token: Token) -> Optional[LinkNode]:
    url = decode_entities(token.attrs.get("HREF", "")).strip()
    if not url:
        logger.debug(f"Skipping bookmark without HREF at offset {token.position}")
        return None
    title = decode_entities(token.text.strip()) or url
    return LinkNode(
        title=title,
        url=url,
        add_date=coerce_timestamp(token.attrs.get("ADD_DATE")),
        icon=token.attrs.get("ICON"),
    )


class BookmarkTreeNormalizer:
    """
    Validates a decoded JSON tree and converts it to canonical nodes.

    Positions in error messages use the ``root[2].children[0]`` notation.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale

    def normalize(self, data: Any) -> List[BookmarkNode]:
        """
        Normalize decoded JSON into a bookmark forest.

        Args:
            data: A list of nodes, or an object with a ``children`` list

        Returns:
            List of canonical nodes

        Raises:
            InvalidFormatError: If the top-level shape is not supported
            MissingTypeError: If a node has no valid ``type``
            InvalidFormatError: If folders nest deeper than ``MAX_FOLDER_DEPTH``
            MissingUrlError: If a link has no usable ``url``
        """
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict) and isinstance(data.get("children"), list):
            items = data["children"]
        else:
            raise InvalidFormatError(get_message("invalid_shape", self.locale))

        return [
            self._normalize_node(item, f"root[{index}]")
            for index, item in enumerate(items)
        ]

    def _normalize_node(self, node: Any, path: str, depth: int = 1) -> BookmarkNode:
        node_type = node.get("type") if isinstance(node, dict) else None

        if node_type == "folder":
            if depth > MAX_FOLDER_DEPTH:
                raise InvalidFormatError(
                    get_message(
                        "too_deep", self.locale, path=path, limit=MAX_FOLDER_DEPTH
                    ),
                    path=path,
                )
            children = node.get("children")
            if not isinstance(children, list):
                children = []
            return FolderNode(
                title=self._text(node.get("title")),
                add_date=coerce_timestamp(node.get("addDate")),
                last_modified=coerce_timestamp(node.get("lastModified")),
                children=tuple(
                    self._normalize_node(
                        child, f"{path}.children[{index}]", depth + 1
                    )
                    for index, child in enumerate(children)
                ),
            )

        if node_type == "link":
            url = node.get("url")
            if not isinstance(url, str) or not url.strip():
                raise MissingUrlError(
                    get_message("missing_url", self.locale, path=path), path=path
                )
            url = url.strip()
            return LinkNode(
                title=self._text(node.get("title")) or url,
                url=url,
                add_date=coerce_timestamp(node.get("addDate")),
                icon=self._optional_text(node.get("icon")),
                description=self._optional_text(node.get("description")),
            )

        raise MissingTypeError(
            get_message("missing_type", self.locale, path=path), path=path
        )

    @staticmethod
    def _text(value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @staticmethod
    def _optional_text(value: Any) -> Optional[str]:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


class BookmarkTreeParser:
    """
    Parser for bookmark uploads.

    Handles the Netscape bookmark file format and the JSON tree format, and
    decodes raw upload bytes before either.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        """
        Initialize the bookmark tree parser.

        Args:
            locale: Language for error messages
        """
        self.locale = locale
        self.normalizer = BookmarkTreeNormalizer(locale)
        self.logger = logging.getLogger(__name__)

    def parse_html(self, html: str) -> List[BookmarkNode]:
        """
        Parse Netscape bookmark HTML into a bookmark forest.

        Args:
            html: Bookmark document text

        Returns:
            Top-level folders and links; empty when nothing was recognised
        """
        nodes = build_tree(tokenize(html))
        self.logger.debug(f"Parsed {len(nodes)} top-level nodes from HTML")
        return nodes

    def parse_json(self, text: str) -> List[BookmarkNode]:
        """
        Parse a JSON bookmark tree.

        Args:
            text: JSON document text

        Returns:
            Canonical bookmark forest

        Raises:
            InvalidFormatError: If the text is not JSON or has the wrong shape
            MissingTypeError: If a node has no valid ``type``
            MissingUrlError: If a link has no usable ``url``
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError, RecursionError) as e:
            raise InvalidFormatError(
                get_message("invalid_json", self.locale, detail=str(e))
            ) from e

        nodes = self.normalizer.normalize(data)
        self.logger.debug(f"Parsed {len(nodes)} top-level nodes from JSON")
        return nodes

    def parse(self, text: str, fmt: Optional[str] = None) -> List[BookmarkNode]:
        """
        Parse text in an explicit or detected format.

        Args:
            text: Document text
            fmt: ``"html"``, ``"json"`` or None to detect

        Returns:
            Canonical bookmark forest
        """
        fmt = (fmt or self.detect_format(text)).lower()
        if fmt == FORMAT_JSON:
            return self.parse_json(text)
        if fmt == FORMAT_HTML:
            return self.parse_html(text)
        raise InvalidFormatError(f"Unsupported bookmark format: {fmt}")

    @staticmethod
    def detect_format(text: str) -> str:
        """Return ``"json"`` when the text starts like JSON, else ``"html"``."""
        stripped = text.lstrip().lstrip(chr(0xFEFF)).lstrip()
        if stripped[:1] in ("[", "{"):
            return FORMAT_JSON
        return FORMAT_HTML

    def decode_upload(self, data: Union[bytes, str]) -> str:
        """
        Decode raw upload bytes to text.

        UTF-8 is tried first; otherwise the encoding is detected with
        chardet, falling back to UTF-8 with replacement characters when the
        detection confidence is low.

        Args:
            data: Raw bytes or already-decoded text

        Returns:
            Document text
        """
        if isinstance(data, str):
            return data

        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        result = chardet.detect(data[:65536])
        encoding = result.get("encoding") or "utf-8"
        confidence = result.get("confidence") or 0.0
        self.logger.debug(
            f"Detected encoding: {encoding} (confidence: {confidence:.2f})"
        )

        if confidence < 0.7:
            self.logger.warning(
                f"Low encoding confidence ({confidence:.2f}), using utf-8"
            )
            return data.decode("utf-8", errors="replace")

        try:
            return data.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            return data.decode("utf-8", errors="replace")
