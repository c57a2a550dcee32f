from datetime import datetime, timezone
import json
from pathlib import Path
import xml.etree.ElementTree as ET

import pytest

from feedwright.core.errors import ConfigurationError, OutputError
from feedwright.core.types import Feed, FeedItem
from feedwright.output import output_path, render_feed, write_feed

STAMP = datetime(2024, 4, 5, 6, 7, 8, tzinfo=timezone.utc)


def _feed() -> Feed:
    return Feed(
        title="Bugs & Crashes",
        link="https://example.com/",
        description="Tracker",
        updated=STAMP,
        items=[
            FeedItem(
                title="Heap <overflow>",
                link="https://example.com/1",
                author="Ann",
                id="1",
                created=STAMP,
                description="<p>details</p>",
            ),
            FeedItem(title="Bare", link="https://example.com/2"),
        ],
    )


def test_render_rss_escapes_and_formats_dates():
    text = render_feed(_feed(), "rss")
    root = ET.fromstring(text.encode("utf-8"))

    channel = root.find("channel")
    assert channel.findtext("title") == "Bugs & Crashes"
    items = channel.findall("item")
    assert items[0].findtext("title") == "Heap <overflow>"
    assert items[0].findtext("description") == "<p>details</p>"
    assert items[0].findtext("pubDate") == "Fri, 05 Apr 2024 06:07:08 +0000"
    assert items[0].findtext("guid") == "1"
    assert items[1].findtext("guid") == "https://example.com/2"
    assert items[1].find("pubDate") is None


def test_render_atom():
    ns = {"a": "http://www.w3.org/2005/Atom"}
    root = ET.fromstring(render_feed(_feed(), "atom").encode("utf-8"))

    assert root.findtext("a:title", namespaces=ns) == "Bugs & Crashes"
    entries = root.findall("a:entry", ns)
    assert entries[0].findtext("a:published", namespaces=ns) == "2024-04-05T06:07:08+00:00"
    assert entries[0].findtext("a:author/a:name", namespaces=ns) == "Ann"
    # Undated entries fall back to the feed's updated time.
    assert entries[1].findtext("a:updated", namespaces=ns) == "2024-04-05T06:07:08+00:00"


def test_render_json_feed():
    data = json.loads(render_feed(_feed(), "JSON"))
    assert data["version"] == "https://jsonfeed.org/version/1.1"
    assert data["items"][0]["authors"] == [{"name": "Ann"}]
    assert data["items"][0]["content_html"] == "<p>details</p>"
    assert data["items"][1]["id"] == "https://example.com/2"
    assert "date_published" not in data["items"][1]


def test_unknown_format():
    with pytest.raises(ConfigurationError):
        render_feed(_feed(), "opml")


def test_write_feed_creates_directory(tmp_path: Path):
    path = output_path(tmp_path / "out", "syzbot", "rss")
    assert path.name == "syzbot.xml"

    write_feed(_feed(), path, "rss")
    write_feed(_feed(), path, "rss")

    assert path.read_text(encoding="utf-8").startswith("<?xml")
    assert output_path(tmp_path, "x", "json").name == "x.json"


def test_write_feed_reports_unwritable_path(tmp_path: Path):
    target = tmp_path / "feed.xml"
    target.mkdir()
    with pytest.raises(OutputError):
        write_feed(_feed(), target, "rss")


def test_rss_author_is_reserved_for_email_addresses():
    feed = _feed()
    feed.items[1].author = "ann@example.com (Ann)"
    root = ET.fromstring(render_feed(feed, "rss").encode("utf-8"))
    plain, email = root.find("channel").findall("item")

    assert plain.find("author") is None
    assert plain.findtext("{http://purl.org/dc/elements/1.1/}creator") == "Ann"
    assert email.findtext("author") == "ann@example.com (Ann)"
    assert email.find("{http://purl.org/dc/elements/1.1/}creator") is None
