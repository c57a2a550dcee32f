"""
Project Zero root cause analysis source.

The RCA index is a table whose rows read ``CVE-YYYY-NNNN: Title``. Every
RCA ever seen is kept and the feed lists all of them, most recently
discovered first; RCAs discovered in the same run are ordered by CVE number,
newest first. The author is read from each RCA's own page, once, when it is
first discovered.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any

from ..core.assembler import assemble
from ..core.document import node_text, parse_document
from ..core.extractor import FieldMap, extract
from ..core.reconcile import KnownEntry, Policy, numeric_suffix_key
from ..core.selectors import compile_selector, match_first
from ..core.types import FeedItem
from ..fetch import get_url
from .base import StatefulSource

logger = logging.getLogger(__name__)

INDEX_URL = "https://googleprojectzero.github.io/0days-in-the-wild/rca.html"

INDEX_FIELDS = FieldMap.from_strings(
    container=".post-content table:first-of-type tr:not(:first-of-type):not(:last-of-type)",
    title="td:first-of-type",
    link="a:last-of-type",
)
AUTHOR_SELECTOR = compile_selector(".post-content p:first-of-type")


@dataclass
class RootCauseAnalysis:
    cve: str
    title: str
    link: str = ""
    author: str = ""

    @property
    def identity(self) -> str:
        return self.cve

    @property
    def observed_at(self) -> datetime | None:
        return None

    def to_state(self) -> dict[str, Any]:
        return {"cve": self.cve, "title": self.title, "link": self.link, "author": self.author}


def parse_index(html: bytes | str, base_url: str = INDEX_URL) -> list[RootCauseAnalysis]:
    """Read the RCA rows from the index page; malformed titles are skipped."""
    rcas: list[RootCauseAnalysis] = []
    for record in extract(INDEX_FIELDS, parse_document(html), base_url=base_url):
        title = record.get("title")
        cve, sep, rest = title.partition(":")
        if not sep:
            logger.warning("Got an unexpected title: %s", title)
            continue
        rcas.append(RootCauseAnalysis(cve=cve.strip(), title=rest.strip(), link=record.get("link")))
    return rcas


def parse_author(html: bytes | str) -> str:
    node = match_first(AUTHOR_SELECTOR, parse_document(html))
    return node_text(node) if node is not None else ""


def entry_to_item(identity: str, entry: KnownEntry) -> FeedItem:
    fields = entry.fields
    return FeedItem(
        title=f"{fields.get('cve', identity)}: {fields.get('title', '')}",
        link=fields.get("link", ""),
        author=fields.get("author", ""),
        id=identity,
        created=entry.observed_at,
        updated=entry.observed_at,
    )


class ProjectZeroRCASource(StatefulSource):
    name = "project_zero_rca"
    state_key = "projectzerorca"
    title = "Project Zero - Root Cause Analysis"
    link = INDEX_URL

    def produce_items(self) -> list[FeedItem]:
        result = get_url(INDEX_URL, self.cfg.fetch)
        rcas = parse_index(result.content)

        reconciled = self.reconcile_batch(rcas, Policy.ALL, tie_break=numeric_suffix_key)
        for identity in reconciled.new_identities:
            fields = reconciled.state.known[identity].fields
            logger.info("New RCA: %s [%s]", fields.get("title", ""), identity)
            if fields.get("link"):
                page = get_url(fields["link"], self.cfg.fetch)
                fields["author"] = parse_author(page.content)
        self.commit(reconciled)

        candidates = [entry_to_item(identity, entry) for identity, entry in reconciled.entries()]
        return assemble(candidates, self.hooks)
