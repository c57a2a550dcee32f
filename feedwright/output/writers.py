from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.errors import ConfigurationError, OutputError
from ..core.types import Feed, FeedItem

FORMATS = ("rss", "atom", "json")
EXTENSIONS = {"rss": "xml", "atom": "atom", "json": "json"}

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _rfc822(value: datetime) -> str:
    return format_datetime(_utc(value))


def _rfc3339(value: datetime) -> str:
    return _utc(value).isoformat()


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["xml"]),
        keep_trailing_newline=True,
    )
    env.filters["rfc822"] = _rfc822
    env.filters["rfc3339"] = _rfc3339
    return env


def _json_item(item: FeedItem) -> dict[str, Any]:
    data: dict[str, Any] = {"id": item.id or item.link}
    if item.link:
        data["url"] = item.link
    if item.title:
        data["title"] = item.title
    data["content_html"] = item.content or item.description
    if item.content and item.description:
        data["summary"] = item.description
    if item.created:
        data["date_published"] = _rfc3339(item.created)
    if item.updated:
        data["date_modified"] = _rfc3339(item.updated)
    if item.author:
        data["authors"] = [{"name": item.author}]
    return data


def render_json(feed: Feed) -> str:
    data: dict[str, Any] = {
        "version": JSON_FEED_VERSION,
        "title": feed.title,
        "home_page_url": feed.link,
    }
    if feed.description:
        data["description"] = feed.description
    data["items"] = [_json_item(item) for item in feed.items]
    return json.dumps(data, ensure_ascii=False, indent=2)


def render_feed(feed: Feed, fmt: str) -> str:
    """Serialize a feed as "rss", "atom", or "json"."""
    fmt = fmt.lower()
    if fmt == "json":
        return render_json(feed)
    if fmt not in FORMATS:
        raise ConfigurationError(f"Unknown output format {fmt!r} (expected one of {', '.join(FORMATS)})")
    template = _environment().get_template(f"{fmt}.xml")
    return template.render(feed=feed, updated=feed.updated or datetime.now(timezone.utc))


def output_path(directory: Path, name: str, fmt: str) -> Path:
    return Path(directory) / f"{name}.{EXTENSIONS.get(fmt.lower(), fmt.lower())}"


def write_feed(feed: Feed, path: Path, fmt: str) -> Path:
    """Render ``feed`` and replace whatever is at ``path``.

    Raises:
        ConfigurationError: If the format is unknown
        OutputError: If the file or its directory cannot be written
    """
    text = render_feed(feed, fmt)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Unable to write feed {path}: {exc}") from exc
    return path
