"""
Selector-driven record extraction.

A FieldMap names one container selector (the repeating record boundary) plus
optional per-field selectors. ``extract`` walks every container match and
renders each field according to its kind:

- text fields (title, author, id): visible text, stripped
- markup fields (description, content): inner markup, tags preserved
- link: the href attribute, normalized against the page base address
- timestamps (created, updated): parsed with a configured strftime format

A problem with one field never aborts the document. It is logged, recorded
as a FieldIssue on the record, and the field is left unset.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
import logging
from urllib.parse import urlsplit

from bs4 import Tag

from .document import get_attribute, node_markup, node_text
from .errors import ConfigurationError
from .selectors import Selector, compile_selector, match_all, match_first
from .types import ExtractedRecord, FieldIssue

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "author", "id")
MARKUP_FIELDS = ("description", "content")
LINK_FIELD = "link"
TIME_FIELDS = ("created", "updated")


@dataclass(frozen=True)
class FieldMap:
    """Compiled selectors for one page layout.

    Attributes:
        container: Selector for the repeating record boundary (mandatory)
        title, link, author, description, id, created, updated, content:
            Optional field selectors, scoped to each container match
        created_format: strftime format for the created field
        updated_format: strftime format for the updated field
    """

    container: Selector | None
    title: Selector | None = None
    link: Selector | None = None
    author: Selector | None = None
    description: Selector | None = None
    id: Selector | None = None
    created: Selector | None = None
    updated: Selector | None = None
    content: Selector | None = None
    created_format: str = ""
    updated_format: str = ""

    @classmethod
    def from_strings(
        cls,
        container: str,
        created_format: str = "",
        updated_format: str = "",
        **selectors: str | None,
    ) -> FieldMap:
        """Compile a FieldMap from selector strings.

        Every selector is compiled up front, so a malformed one surfaces
        before any page is fetched. Empty values leave the field unset.

        Raises:
            ConfigurationError: On an empty container, an unknown field
                name, or invalid selector syntax
        """
        if not container:
            raise ConfigurationError("Missing an item container selector")
        known = {f.name for f in fields(cls)} - {"container", "created_format", "updated_format"}
        compiled: dict[str, Selector] = {}
        for name, text in selectors.items():
            if name not in known:
                raise ConfigurationError(f"Unknown selector name: {name}")
            if text:
                compiled[name] = compile_selector(text)
        return cls(
            container=compile_selector(container),
            created_format=created_format or "",
            updated_format=updated_format or "",
            **compiled,
        )

    def field_selectors(self) -> list[tuple[str, Selector]]:
        """Return the (name, selector) pairs that are set, container excluded."""
        pairs = []
        for name in TEXT_FIELDS + (LINK_FIELD,) + MARKUP_FIELDS + TIME_FIELDS:
            selector = getattr(self, name)
            if selector is not None:
                pairs.append((name, selector))
        return pairs


def normalize_link(href: str, base: str) -> str:
    """Resolve an href against the page base address.

    Rules, in order:
        ``./path``  -> ``base/path``
        ``//host``  -> unchanged (protocol relative)
        ``/path``   -> ``scheme://host/path`` using the base's scheme and host
        ``http://`` or ``https://`` -> unchanged
        anything else -> ``base/path``

    Examples:
        >>> normalize_link("./foo", "https://example.com/blog")
        'https://example.com/blog/foo'
        >>> normalize_link("/bar", "https://example.com/blog")
        'https://example.com/bar'
    """
    href = href.strip()
    trimmed_base = base.rstrip("/")
    if not href:
        return base
    if href.startswith("./"):
        return f"{trimmed_base}/{href[2:]}"
    if href.startswith("//"):
        return href
    if href.startswith("/"):
        parts = urlsplit(base)
        return f"{parts.scheme or 'https'}://{parts.netloc}{href}"
    if href.lower().startswith(("http://", "https://")):
        return href
    return f"{trimmed_base}/{href}"


def parse_timestamp(value: str, fmt: str) -> datetime:
    """Parse ``value`` with ``fmt``; naive results are assumed to be UTC."""
    parsed = datetime.strptime(value, fmt)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def extract(field_map: FieldMap, root: Tag, base_url: str = "") -> list[ExtractedRecord]:
    """Extract one record per container match.

    Args:
        field_map: Compiled selectors for the page
        root: Parsed document (or any subtree) to search
        base_url: Address used to normalize relative links

    Returns:
        Records in document order. Fields that failed are left unset and
        described in each record's ``issues``.

    Raises:
        ConfigurationError: If the container selector is unset
    """
    if field_map.container is None:
        raise ConfigurationError("Missing an item container selector")

    selectors = field_map.field_selectors()
    records: list[ExtractedRecord] = []
    for container in match_all(field_map.container, root):
        record = ExtractedRecord()
        for name, selector in selectors:
            node = match_first(selector, container)
            if node is None:
                continue
            _render_field(record, name, node, field_map, base_url)
        for issue in record.issues:
            logger.warning(
                "Field %s skipped: %s", issue.field, issue.message,
                extra={"event": "field_issue", "field": issue.field, "kind": issue.kind},
            )
        records.append(record)
    return records


def _render_field(
    record: ExtractedRecord,
    name: str,
    node: Tag,
    field_map: FieldMap,
    base_url: str,
) -> None:
    if name in MARKUP_FIELDS:
        record.values[name] = node_markup(node)
        return

    if name == LINK_FIELD:
        href = get_attribute(node, "href")
        if href is None:
            record.values[name] = ""
            record.issues.append(FieldIssue(name, "Unable to find href attribute for link"))
            return
        record.values[name] = normalize_link(href, base_url) if base_url else href
        return

    text = node_text(node)
    if name in TEXT_FIELDS:
        record.values[name] = text
        return

    # Timestamp fields
    record.values[name] = text
    fmt = field_map.created_format if name == "created" else field_map.updated_format
    if not fmt:
        record.issues.append(
            FieldIssue(name, f"Missing format for {name} timestamp", kind="config")
        )
        return
    try:
        setattr(record, name, parse_timestamp(text, fmt))
    except ValueError as exc:
        record.issues.append(FieldIssue(name, f"Cannot parse {text!r}: {exc}"))
