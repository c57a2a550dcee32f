"""
Document model glue around BeautifulSoup.

Parsed pages are plain BeautifulSoup trees: elements are ``Tag`` nodes and
text is ``NavigableString``. This module owns the parser choice and the two
renderings the extractor needs (visible text and inner markup).
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .errors import ParseError

PARSER = "html.parser"


def parse_document(data: bytes | str) -> BeautifulSoup:
    """Parse raw markup into a document tree.

    Args:
        data: Page body as bytes (encoding sniffed) or text

    Returns:
        The parsed BeautifulSoup document

    Raises:
        ParseError: If the markup cannot be decoded or parsed
    """
    try:
        return BeautifulSoup(data, PARSER)
    except (TypeError, ValueError, UnicodeDecodeError) as exc:
        raise ParseError(f"Unable to parse markup: {exc}") from exc


def node_text(node: Tag | NavigableString) -> str:
    """Concatenate every text node under ``node`` in document order, then strip.

    Comments are not visible text and are skipped. Inner whitespace is kept
    as-is so the result matches what the page shows between tags.
    """
    if isinstance(node, NavigableString):
        return str(node).strip()
    parts = [
        str(text)
        for text in node.find_all(string=True)
        if not isinstance(text, Comment)
    ]
    return "".join(parts).strip()


def node_markup(node: Tag | NavigableString) -> str:
    """Serialize the inner markup of ``node`` with tags preserved."""
    if isinstance(node, NavigableString):
        return str(node)
    return node.decode_contents()


def get_attribute(node: Tag, name: str) -> str | None:
    """Look up an attribute case-insensitively; returns None when absent."""
    wanted = name.lower()
    for key, value in node.attrs.items():
        if key.lower() == wanted:
            if isinstance(value, list):
                return " ".join(value)
            return value
    return None
