"""
CSS selector engine over the document model.

Selectors are compiled once with soupsieve (the engine behind BeautifulSoup's
``select``) and then matched against any subtree. A compiled Selector is
immutable and matching is a pure function of the tree.

Unlike ``Tag.select``, matching here treats the scope node itself as a
candidate, so a field selector may target the container element directly.
"""

from __future__ import annotations

from dataclasses import dataclass

import soupsieve
from bs4 import Tag

from .errors import ConfigurationError


@dataclass(frozen=True)
class Selector:
    """A compiled CSS selector.

    Attributes:
        text: The selector source, kept for diagnostics
        compiled: The soupsieve matcher
    """

    text: str
    compiled: soupsieve.SoupSieve

    def __repr__(self) -> str:
        return f"Selector({self.text!r})"


def compile_selector(text: str) -> Selector:
    """Compile a selector string.

    Args:
        text: CSS selector source

    Returns:
        The compiled Selector

    Raises:
        ConfigurationError: If the selector is empty or syntactically invalid
    """
    if not text or not text.strip():
        raise ConfigurationError("Selector must not be empty")
    try:
        compiled = soupsieve.compile(text)
    except soupsieve.SelectorSyntaxError as exc:
        raise ConfigurationError(f"Invalid selector {text!r}: {exc}") from exc
    return Selector(text=text, compiled=compiled)


def match_all(selector: Selector, root: Tag) -> list[Tag]:
    """Return every node in ``root``'s subtree matching ``selector``.

    Results are in document order, with ``root`` first when it matches.
    An empty list means no match; it is never an error.
    """
    matches: list[Tag] = []
    if selector.compiled.match(root):
        matches.append(root)
    matches.extend(selector.compiled.select(root))
    return matches


def match_first(selector: Selector, root: Tag) -> Tag | None:
    """Return the first node of ``match_all``, or None."""
    if selector.compiled.match(root):
        return root
    return selector.compiled.select_one(root)
