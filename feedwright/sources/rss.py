"""
Upstream RSS/Atom source.

Re-emitting an existing feed looks redundant, but it lets item hooks filter
or rewrite entries (fix dates, drop entries without authors) before the feed
is republished.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import time
from typing import Any

import feedparser

from ..config import AppConfig
from ..core.assembler import NO_HOOKS, ItemHooks, assemble
from ..core.errors import ConfigurationError, ParseError
from ..core.types import FeedItem
from ..fetch import get_url
from .base import Source

logger = logging.getLogger(__name__)


def _struct_to_datetime(value: Any) -> datetime | None:
    if isinstance(value, time.struct_time):
        try:
            return datetime(*value[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return None
    return None


def entry_to_item(entry: Any) -> FeedItem:
    """Convert a feedparser entry to a FeedItem."""
    content = ""
    if entry.get("content"):
        content = entry.content[0].get("value", "")
    published = _struct_to_datetime(entry.get("published_parsed"))
    updated = _struct_to_datetime(entry.get("updated_parsed")) or published
    link = entry.get("link", "")
    return FeedItem(
        title=entry.get("title", ""),
        link=link,
        author=entry.get("author", ""),
        id=entry.get("id") or link,
        created=published,
        updated=updated,
        description=entry.get("summary", ""),
        content=content,
    )


class RssSource(Source):
    """Re-publishes an upstream RSS/Atom feed through the item hooks."""

    def __init__(self, name: str, url: str, cfg: AppConfig, hooks: ItemHooks = NO_HOOKS):
        if not url:
            raise ConfigurationError(f"{name}: missing upstream feed url")
        super().__init__(cfg, hooks)
        self.name = name
        self.url = url
        self.title = name
        self.link = url

    def produce_items(self) -> list[FeedItem]:
        result = get_url(self.url, self.cfg.fetch)
        parsed = feedparser.parse(result.content)

        if parsed.bozo:
            if not parsed.entries:
                raise ParseError(f"Invalid RSS/Atom feed: {self.url} ({parsed.get('bozo_exception')})")
            logger.warning("Feed %s parsed with problems: %s", self.url, parsed.get("bozo_exception"))

        meta = parsed.feed
        self.title = meta.get("title") or self.name
        self.link = meta.get("link") or self.url
        self.description = meta.get("subtitle", "")
        return assemble((entry_to_item(entry) for entry in parsed.entries), self.hooks)
