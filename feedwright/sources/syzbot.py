"""
Syzbot upstream crash source.

Crashes currently listed on the dashboard are remembered with the time they
were first seen. The feed shows the listed crashes, most recently first
seen first, capped at FEED_LIMIT items after filtering. Crashes first seen
in the same run keep the order the dashboard lists them in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from ..core.assembler import assemble
from ..core.document import get_attribute, node_text, parse_document
from ..core.extractor import normalize_link
from ..core.reconcile import KnownEntry, Policy
from ..core.selectors import compile_selector, match_all, match_first
from ..core.types import FeedItem
from ..fetch import get_url
from .base import StatefulSource

logger = logging.getLogger(__name__)

UPSTREAM_URL = "https://syzkaller.appspot.com/upstream"
BUG_URL = "https://syzkaller.appspot.com/bug?id={id}"
FEED_LIMIT = 20

ROW_SELECTOR = compile_selector("table.list_table:nth-of-type(2) tbody tr")
TITLE_SELECTOR = compile_selector("td.title")
LINK_SELECTOR = compile_selector("td.title a")
REPRO_SELECTOR = compile_selector("td.stat")
BISECT_SELECTOR = compile_selector("td.bisect_status")


@dataclass
class SyzbotCrash:
    id: str
    title: str = ""
    repro: str = ""
    bisect_status: str = ""

    @property
    def identity(self) -> str:
        return self.id

    @property
    def observed_at(self) -> datetime | None:
        return None

    def to_state(self) -> dict[str, Any]:
        return {"title": self.title, "repro": self.repro, "bisect_status": self.bisect_status}


def _cell_text(selector, row) -> str:
    node = match_first(selector, row)
    return node_text(node) if node is not None else ""


def parse_crashes(html: bytes | str, base_url: str = UPSTREAM_URL) -> list[SyzbotCrash]:
    """Read crash rows from the dashboard; rows without a bug id are skipped."""
    crashes: list[SyzbotCrash] = []
    for row in match_all(ROW_SELECTOR, parse_document(html)):
        link_node = match_first(LINK_SELECTOR, row)
        href = get_attribute(link_node, "href") if link_node is not None else None
        crash_id = ""
        if href:
            query = parse_qs(urlsplit(normalize_link(href, base_url)).query)
            crash_id = (query.get("id") or [""])[0]
        if not crash_id:
            logger.warning("Skipping crash row without an id: %s", _cell_text(TITLE_SELECTOR, row))
            continue
        crashes.append(
            SyzbotCrash(
                id=crash_id,
                title=_cell_text(TITLE_SELECTOR, row),
                repro=_cell_text(REPRO_SELECTOR, row),
                bisect_status=_cell_text(BISECT_SELECTOR, row),
            )
        )
    return crashes


def crash_to_item(crash: SyzbotCrash, entry: KnownEntry) -> FeedItem:
    return FeedItem(
        title=crash.title,
        link=BUG_URL.format(id=crash.id),
        author="Syzbot",
        id=crash.id,
        created=entry.observed_at,
        updated=entry.observed_at,
    )


class SyzbotSource(StatefulSource):
    name = "syzbot"
    state_key = "syzbot"
    title = "Syzbot - Upstream Crashes"
    link = UPSTREAM_URL

    def produce_items(self) -> list[FeedItem]:
        result = get_url(UPSTREAM_URL, self.cfg.fetch)
        crashes = parse_crashes(result.content)
        live = {crash.id: crash for crash in crashes}
        row_rank = {crash.id: -index for index, crash in reversed(list(enumerate(crashes)))}

        reconciled = self.reconcile_batch(
            crashes, Policy.ALL, restrict_to=live, tie_break=lambda identity: row_rank.get(identity, 0)
        )
        self.commit(reconciled)

        candidates = (
            crash_to_item(live[identity], entry) for identity, entry in reconciled.entries()
        )
        return assemble(candidates, self.hooks, limit=FEED_LIMIT)
