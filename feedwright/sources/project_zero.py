"""
Project Zero issue tracker source.

The tracker API lists every public issue. Issues are tracked with the
recency-bounded policy: each newly seen issue is stamped with its discovery
time and pushed onto a capped most-recent-first list. The feed is rendered
from stored fields, so an issue stays in the feed even if the tracker stops
listing it, until newer discoveries evict it.

Note: items are filtered after the recency list has been sized, so a
restrictive filter yields fewer items rather than pulling in older ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any

from ..core.assembler import assemble
from ..core.errors import ParseError
from ..core.reconcile import KnownEntry, Policy
from ..core.types import FeedItem
from ..fetch import decode_json, post_json
from .base import StatefulSource

logger = logging.getLogger(__name__)

LIST_ISSUES_URL = "https://bugs.chromium.org/prpc/monorail.Issues/ListIssues"
TRACKER_URL = "https://bugs.chromium.org/p/project-zero/issues/list?q=&can=1&sort=-id"
DETAIL_URL = "https://bugs.chromium.org/p/project-zero/issues/detail?id={id}"
PAGE_SIZE = 1000


@dataclass
class TrackerIssue:
    """One issue from the tracker listing."""

    local_id: int
    summary: str
    owner: str = ""
    opened: int = 0

    @property
    def identity(self) -> str:
        return str(self.local_id)

    @property
    def observed_at(self) -> datetime | None:
        return None

    def to_state(self) -> dict[str, Any]:
        return {"summary": self.summary, "owner": self.owner, "opened": self.opened}

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> TrackerIssue:
        try:
            local_id = int(raw["localId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Issue without a usable localId: {raw!r}") from exc
        try:
            owner = (raw.get("ownerRef") or {}).get("displayName") or ""
            opened = int(raw.get("openedTimestamp") or 0)
        except (AttributeError, TypeError, ValueError) as exc:
            raise ParseError(f"Malformed issue {local_id}: {exc}") from exc
        return cls(
            local_id=local_id,
            summary=str(raw.get("summary") or ""),
            owner=str(owner),
            opened=opened,
        )


def build_query(start: int, count: int) -> dict[str, Any]:
    # Ascending ids, so the newest issue is the last one prepended to the recency list.
    return {
        "projectNames": ["project-zero"],
        "query": "",
        "cannedQuery": 1,
        "sortSpec": "id",
        "pagination": {"start": start, "maxItems": count},
    }


def entry_to_item(identity: str, entry: KnownEntry) -> FeedItem:
    fields = entry.fields
    opened = fields.get("opened") or 0
    summary = fields.get("summary", "")
    return FeedItem(
        title=summary,
        link=DETAIL_URL.format(id=identity),
        author=fields.get("owner", ""),
        id=identity,
        created=datetime.fromtimestamp(opened, tz=timezone.utc),
        updated=entry.observed_at,
        description=summary,
        content=summary,
    )


class ProjectZeroSource(StatefulSource):
    name = "project_zero"
    state_key = "projectzero"
    title = "Project Zero Bug Tracker"
    link = TRACKER_URL

    def _headers(self) -> dict[str, str]:
        headers = {"Origin": "https://bugs.chromium.org"}
        token = self.cfg.sources.project_zero_token
        if token:
            headers["X-Xsrf-Token"] = token
        return headers

    def fetch_issues(self) -> list[TrackerIssue]:
        """Page through the full listing."""
        issues: list[TrackerIssue] = []
        start = 0
        while True:
            result = post_json(
                LIST_ISSUES_URL, build_query(start, PAGE_SIZE), self.cfg.fetch, self._headers()
            )
            data = decode_json(result, strip_prefix_line=True)
            if not isinstance(data, dict):
                raise ParseError("Tracker response is not an object")
            raw_issues = data.get("issues") or []
            if not isinstance(raw_issues, list):
                raise ParseError("Tracker response issues is not a list")
            issues.extend(TrackerIssue.from_api(raw) for raw in raw_issues)
            try:
                total = int(data.get("totalResults") or 0)
            except (TypeError, ValueError) as exc:
                raise ParseError(f"Tracker response has a bad totalResults: {exc}") from exc
            start += PAGE_SIZE
            if start >= total:
                break
        return issues

    def produce_items(self) -> list[FeedItem]:
        issues = self.fetch_issues()
        result = self.reconcile_batch(issues, Policy.RECENT)
        for identity in result.new_identities:
            logger.info("[%s] %s", identity, result.state.known[identity].fields.get("summary", ""))
        self.commit(result)
        candidates = [entry_to_item(identity, entry) for identity, entry in result.entries()]
        return assemble(candidates, self.hooks)
