"""
Apple Security Research blog source.

The blog index embeds its post list as JSON in a
``<script type="application/json">`` element; posts are read from
``props.pageProps.blogs``.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from typing import Any

from ..core.assembler import assemble
from ..core.document import parse_document
from ..core.errors import ParseError
from ..core.selectors import compile_selector, match_first
from ..core.types import FeedItem
from ..fetch import get_url
from .base import Source

logger = logging.getLogger(__name__)

BLOG_URL = "https://security.apple.com/blog/"
DATA_SELECTOR = compile_selector('script[type="application/json"]')


def blog_to_item(blog: dict[str, Any]) -> FeedItem:
    link = f"{BLOG_URL}{blog.get('slug') or ''}"
    published = None
    date = blog.get("date")
    if date:
        try:
            published = datetime.strptime(str(date), "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError:
            logger.warning("Unexpected blog date %r", date)
    return FeedItem(
        title=str(blog.get("title") or ""),
        link=link,
        id=str(blog.get("id") or link),
        created=published,
        updated=published,
        content=str(blog.get("description") or ""),
    )


def parse_blog_page(html: bytes | str) -> list[dict[str, Any]]:
    """Return the embedded blog entries from the index page.

    Raises:
        ParseError: If the JSON element is missing or malformed
    """
    root = parse_document(html)
    node = match_first(DATA_SELECTOR, root)
    if node is None or not node.string:
        raise ParseError("Failed to find JSON node")
    try:
        page = json.loads(node.string)
        blogs = page["props"]["pageProps"]["blogs"]
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise ParseError(f"Unexpected blog page data: {exc}") from exc
    if not isinstance(blogs, list):
        raise ParseError("Unexpected blog page data: blogs is not a list")
    for blog in blogs:
        if not isinstance(blog, dict):
            raise ParseError(f"Unexpected blog entry: {blog!r}")
    return blogs


class AppleSecuritySource(Source):
    name = "apple_security"
    title = "Apple Security Research"
    link = BLOG_URL

    def produce_items(self) -> list[FeedItem]:
        result = get_url(BLOG_URL, self.cfg.fetch)
        blogs = parse_blog_page(result.content)
        return assemble((blog_to_item(blog) for blog in blogs), self.hooks)
