from datetime import datetime, timezone

import pytest

from feedwright.core.assembler import ItemHooks, assemble, created_from_updated, hooks_from_names
from feedwright.core.errors import ConfigurationError
from feedwright.core.types import FeedItem


def _items(*titles):
    return [FeedItem(title=title) for title in titles]


def test_no_hooks_keeps_everything_in_order():
    assert [i.title for i in assemble(_items("a", "b", "c"))] == ["a", "b", "c"]


def test_modify_runs_before_filter():
    def sign(item):
        item.author = "bot"

    hooks = ItemHooks(filter=lambda item: item.author == "bot", modify=sign)
    survivors = assemble(_items("a", "b"), hooks)
    assert [i.author for i in survivors] == ["bot", "bot"]


def test_filter_drops_items_and_preserves_order():
    hooks = ItemHooks(filter=lambda item: item.title != "b")
    assert [i.title for i in assemble(_items("a", "b", "c"), hooks)] == ["a", "c"]


def test_limit_counts_survivors_only():
    hooks = ItemHooks(filter=lambda item: item.title != "b")
    survivors = assemble(_items("a", "b", "c", "d", "e"), hooks, limit=3)
    assert [i.title for i in survivors] == ["a", "c", "d"]


def test_created_from_updated():
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    item = FeedItem(created=datetime(2020, 1, 1, tzinfo=timezone.utc), updated=stamp)
    created_from_updated(item)
    assert item.created == stamp


def test_hooks_from_names_combines_filters():
    hooks = hooks_from_names(["require_author", "require_link"], ["created_from_updated"])
    items = [
        FeedItem(title="both", author="a", link="https://x"),
        FeedItem(title="no link", author="a"),
        FeedItem(title="no author", link="https://x"),
    ]
    assert [i.title for i in assemble(items, hooks)] == ["both"]


def test_hooks_from_names_empty_means_no_hooks():
    hooks = hooks_from_names([], None)
    assert hooks.filter is None
    assert hooks.modify is None


def test_unknown_hook_name_is_configuration_error():
    with pytest.raises(ConfigurationError, match="require_title"):
        hooks_from_names(["require_title"])
    with pytest.raises(ConfigurationError):
        hooks_from_names(modifiers=["shout"])
