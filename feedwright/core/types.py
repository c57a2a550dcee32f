"""
Core data types for feed generation.

This module defines the structures that flow through every source:
- FeedItem: One normalized output entry (mutable so hooks can rewrite it)
- Feed: Feed-level metadata plus the assembled items
- FieldIssue: A field-level extraction problem, recorded instead of raised
- ExtractedRecord: Raw field values pulled from one container match
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class FeedItem:
    """A normalized feed entry.

    Attributes:
        title: Item headline
        link: Absolute URL of the item
        author: Author display name
        id: Stable identifier; writers fall back to link when empty
        created: Creation (or disclosure) timestamp
        updated: Last-updated timestamp
        description: Short description, may contain markup
        content: Full body, may contain markup
    """

    title: str = ""
    link: str = ""
    author: str = ""
    id: str = ""
    created: datetime | None = None
    updated: datetime | None = None
    description: str = ""
    content: str = ""


@dataclass
class Feed:
    """A complete feed ready for serialization."""

    title: str
    link: str
    description: str = ""
    updated: datetime | None = None
    items: list[FeedItem] = field(default_factory=list)


@dataclass(frozen=True)
class FieldIssue:
    """A problem with a single field of a single record.

    Attributes:
        field: Name of the field (e.g. "link", "created")
        message: Human readable description
        kind: "config" for missing configuration, "extract" for bad data
    """

    field: str
    message: str
    kind: str = "extract"


@dataclass
class ExtractedRecord:
    """Raw values extracted from one container match.

    Text and markup fields are stored in ``values``; timestamp fields are
    parsed into ``created``/``updated`` when a format is configured. Any
    field that could not be produced is listed in ``issues``.
    """

    values: dict[str, str] = field(default_factory=dict)
    created: datetime | None = None
    updated: datetime | None = None
    issues: list[FieldIssue] = field(default_factory=list)

    def get(self, name: str, default: str = "") -> str:
        return self.values.get(name, default)

    @property
    def body(self) -> str:
        """Markup body; content wins over description when both are present."""
        return self.values.get("content") or self.values.get("description", "")
