"""
Generic selector-driven page source.

A PageConfig names the page and its selectors; every container match becomes
one feed item. This source keeps no state: each run reflects the page as it
is now.
"""

from __future__ import annotations

from ..config import AppConfig, PageConfig
from ..core.assembler import NO_HOOKS, ItemHooks, assemble
from ..core.document import parse_document
from ..core.extractor import extract
from ..core.types import ExtractedRecord, FeedItem
from ..fetch import get_url
from .base import Source


def record_to_item(record: ExtractedRecord) -> FeedItem:
    """Map an extracted record onto a feed item."""
    return FeedItem(
        title=record.get("title"),
        link=record.get("link"),
        author=record.get("author"),
        id=record.get("id"),
        created=record.created,
        updated=record.updated,
        description=record.body,
    )


class CssSource(Source):
    """Scrapes one page described by a PageConfig."""

    def __init__(self, name: str, page: PageConfig, cfg: AppConfig, hooks: ItemHooks = NO_HOOKS):
        super().__init__(cfg, hooks)
        self.name = name
        self.page = page
        self.title = page.title
        self.link = page.url

    def produce_items(self) -> list[FeedItem]:
        result = get_url(self.page.url, self.cfg.fetch)
        root = parse_document(result.content)
        records = extract(self.page.field_map, root, base_url=self.page.url)
        return assemble((record_to_item(record) for record in records), self.hooks)
