"""
HackerOne hacktivity source: recently disclosed reports.

Queries the public GraphQL endpoint for the latest hacktivity and keeps the
disclosed reports. The listing is already ordered by the upstream, so no
state is kept.
"""

from __future__ import annotations

import logging
from typing import Any

from dateutil import parser as date_parser

from ..core.errors import ParseError
from ..core.types import FeedItem
from ..core.assembler import assemble
from ..fetch import decode_json, post_json
from .base import Source

logger = logging.getLogger(__name__)

GRAPHQL_URL = "https://hackerone.com/graphql"
HACKTIVITY_URL = (
    "https://hackerone.com/hacktivity?querystring=&filter=type:public"
    "&order_direction=DESC&order_field=latest_disclosable_activity_at&followed_only=false"
)

HACKTIVITY_QUERY = """
query HacktivityPageQuery($querystring: String, $secureOrderBy: FiltersHacktivityItemFilterOrder,
                          $where: FiltersHacktivityItemFilterInput, $count: Int, $cursor: String) {
  hacktivity_items(first: $count, after: $cursor, query: $querystring,
                   secure_order_by: $secureOrderBy, where: $where) {
    edges {
      node {
        __typename
        ... on Disclosed {
          reporter { username }
          team { name }
          report { id title url }
          latest_disclosable_activity_at
          total_awarded_amount
          severity_rating
          currency
        }
      }
    }
  }
}
"""


def build_query(count: int = 25) -> dict[str, Any]:
    return {
        "operationName": "HacktivityPageQuery",
        "variables": {
            "querystring": "",
            "where": {"report": {"disclosed_at": {"_is_null": False}}},
            "secureOrderBy": {"latest_disclosable_activity_at": {"_direction": "DESC"}},
            "count": count,
        },
        "query": HACKTIVITY_QUERY,
    }


def report_title(team: str, severity: str, title: str, bounty: float, currency: str) -> str:
    """Format ``[team] severity - title``, with the bounty appended when paid."""
    text = f"[{team}] {severity} - {title}"
    if bounty > 0:
        text = f"{text} ({bounty:.2f}{currency})"
    return text


def _mapping(node: dict[str, Any], key: str) -> dict[str, Any]:
    value = node.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"Unable to parse HackerOne response. node[{key}] is not an object")
    return value


def node_to_item(node: dict[str, Any]) -> FeedItem:
    """Convert a Disclosed hacktivity node; null values are treated as absent.

    Raises:
        ParseError: If reporter, team, or report is not an object
    """
    reporter = _mapping(node, "reporter")
    team = _mapping(node, "team")
    report = _mapping(node, "report")

    bounty = node.get("total_awarded_amount")
    if isinstance(bounty, bool) or not isinstance(bounty, (int, float)):
        bounty = 0.0

    modified = None
    stamp = node.get("latest_disclosable_activity_at")
    if isinstance(stamp, str):
        try:
            modified = date_parser.isoparse(stamp)
        except ValueError:
            logger.warning("Failed to parse %r", stamp)

    return FeedItem(
        title=report_title(
            str(team.get("name") or ""),
            str(node.get("severity_rating") or ""),
            str(report.get("title") or ""),
            float(bounty),
            str(node.get("currency") or ""),
        ),
        link=str(report.get("url") or ""),
        author=str(reporter.get("username") or ""),
        id=str(report.get("id") or ""),
        updated=modified,
    )


def parse_hacktivity(data: dict[str, Any]) -> list[FeedItem]:
    """Extract disclosed reports from a hacktivity response.

    Raises:
        ParseError: If the response lacks the expected structure
    """
    path = ["data", "hacktivity_items", "edges"]
    current: Any = data
    for depth, key in enumerate(path):
        if not isinstance(current, dict) or key not in current:
            where = "".join(f"[{k}]" for k in path[: depth + 1])
            raise ParseError(f"Unable to parse HackerOne response. resp{where}")
        current = current[key]
    if current is None:
        current = []
    if not isinstance(current, list):
        raise ParseError("Unable to parse HackerOne response. resp[data][hacktivity_items][edges] is not a list")

    items: list[FeedItem] = []
    for edge in current:
        node = edge.get("node") if isinstance(edge, dict) else None
        if not isinstance(node, dict):
            raise ParseError("Edge is missing key(node)")
        if node.get("__typename") != "Disclosed":
            continue
        items.append(node_to_item(node))
    return items


class HackerOneSource(Source):
    name = "hackerone"
    title = "HackerOne Recently Disclosed"
    link = HACKTIVITY_URL

    def produce_items(self) -> list[FeedItem]:
        result = post_json(GRAPHQL_URL, build_query(), self.cfg.fetch)
        return assemble(parse_hacktivity(decode_json(result)), self.hooks)
