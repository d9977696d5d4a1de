"""
Tokenizer for Netscape bookmark HTML.

The bookmark format is not well-formed HTML (``<DT>`` and ``<p>`` are never
closed), so instead of building a DOM the text is scanned once and reduced to
the four token kinds that carry structure. Everything else is skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Structural token kinds."""

    FOLDER_OPEN = "folder_open"  # <DL>
    FOLDER_CLOSE = "folder_close"  # </DL>
    FOLDER_HEADER = "folder_header"  # <DT><H3 ...>title</H3>
    LEAF = "leaf"  # <DT><A ...>title</A>


@dataclass(frozen=True)
class Token:
    """
    One structural token.

    Attributes:
        kind: Token kind
        attrs: Upper-cased attribute map, values raw (headers and leaves only)
        text: Raw inner text, entities not yet decoded
        position: Offset of the token in the source text
    """

    kind: TokenKind
    attrs: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    position: int = 0


class _ScanState(Enum):
    IDLE = 0
    AFTER_DT = 1


_MARKUP_RE = re.compile(
    r"<!--.*?-->|<(?P<slash>/?)(?P<name>[A-Za-z][A-Za-z0-9]*)(?P<attrs>[^>]*)>",
    re.DOTALL,
)
_CLOSING_TAG_RE = {
    "H3": re.compile(r"</H3\s*>", re.IGNORECASE),
    "A": re.compile(r"</A\s*>", re.IGNORECASE),
}
_ATTR_RE = re.compile(r'([\w-]+)\s*=\s*"([^"]*)"')
_ENTITY_RE = re.compile(r"&(?:amp|lt|gt|quot|#39);")
_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}


def parse_attributes(raw: str) -> Dict[str, str]:
    """Parse ``NAME="value"`` pairs into a dict keyed by upper-cased name.

    Values are returned raw, entities included.
    """
    return {name.upper(): value for name, value in _ATTR_RE.findall(raw or "")}


def decode_entities(value: str) -> str:
    """Decode the five standard HTML entities in a single pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], value)


def tokenize(html: str) -> Iterator[Token]:
    """
    Scan bookmark HTML into structural tokens.

    A ``<DT>`` moves the scanner into the AFTER_DT state; only an ``<H3>`` or
    ``<A>`` reached from that state with nothing but whitespace in between
    starts a header or leaf. Any other markup or text returns to IDLE.

    Args:
        html: Bookmark document text

    Yields:
        Tokens in document order
    """
    state = _ScanState.IDLE
    pos = 0

    while True:
        match = _MARKUP_RE.search(html, pos)
        if match is None:
            return

        if state is _ScanState.AFTER_DT and html[pos:match.start()].strip():
            state = _ScanState.IDLE
        pos = match.end()

        name = match.group("name")
        if name is None:
            state = _ScanState.IDLE
            continue

        name = name.upper()
        closing = match.group("slash") == "/"

        if state is _ScanState.AFTER_DT and not closing and name in _CLOSING_TAG_RE:
            state = _ScanState.IDLE
            end = _CLOSING_TAG_RE[name].search(html, pos)
            if end is None:
                logger.debug(f"Unclosed <{name}> at offset {match.start()}, skipping")
                continue
            kind = TokenKind.FOLDER_HEADER if name == "H3" else TokenKind.LEAF
            yield Token(
                kind=kind,
                attrs=parse_attributes(match.group("attrs")),
                text=html[pos:end.start()],
                position=match.start(),
            )
            pos = end.end()
        elif name == "DT" and not closing:
            state = _ScanState.AFTER_DT
        elif name == "DL":
            state = _ScanState.IDLE
            kind = TokenKind.FOLDER_CLOSE if closing else TokenKind.FOLDER_OPEN
            yield Token(kind=kind, position=match.start())
        else:
            state = _ScanState.IDLE
