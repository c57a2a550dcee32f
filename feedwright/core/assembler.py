"""
Item hooks and feed assembly.

Hooks are fixed when a source is constructed. For every candidate item the
modify hook runs first, then the filter decides whether the (possibly
modified) item is kept. Survivors keep their candidate order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from .errors import ConfigurationError
from .types import FeedItem

ItemFilter = Callable[[FeedItem], bool]
ItemModifier = Callable[[FeedItem], None]


@dataclass(frozen=True)
class ItemHooks:
    """Immutable filter/modify pair supplied at source construction."""

    filter: ItemFilter | None = None
    modify: ItemModifier | None = None


NO_HOOKS = ItemHooks()


def assemble(
    candidates: Iterable[FeedItem],
    hooks: ItemHooks = NO_HOOKS,
    limit: int | None = None,
) -> list[FeedItem]:
    """Apply hooks to each candidate and collect the survivors.

    Args:
        candidates: Items in their final order
        hooks: Modify hook (applied first) and filter predicate
        limit: Stop once this many items survived; later candidates fill
            in for filtered ones

    Returns:
        Surviving items in candidate order
    """
    survivors: list[FeedItem] = []
    for item in candidates:
        if hooks.modify is not None:
            hooks.modify(item)
        if hooks.filter is not None and not hooks.filter(item):
            continue
        survivors.append(item)
        if limit is not None and len(survivors) >= limit:
            break
    return survivors


def created_from_updated(item: FeedItem) -> None:
    """Overwrite created with updated so edited or newly disclosed items resurface."""
    item.created = item.updated


def require_author(item: FeedItem) -> bool:
    return bool(item.author)


def require_link(item: FeedItem) -> bool:
    return bool(item.link)


MODIFIERS: dict[str, ItemModifier] = {
    "created_from_updated": created_from_updated,
}

FILTERS: dict[str, ItemFilter] = {
    "require_author": require_author,
    "require_link": require_link,
}


def hooks_from_names(filters: list[str] | None = None, modifiers: list[str] | None = None) -> ItemHooks:
    """Build ItemHooks from the hook names used in configuration.

    Several filters are combined with AND; several modifiers run in order.

    Raises:
        ConfigurationError: If a name is not registered
    """
    filter_funcs = [_lookup(FILTERS, name, "filter") for name in filters or []]
    modify_funcs = [_lookup(MODIFIERS, name, "modifier") for name in modifiers or []]

    def all_filters(item: FeedItem) -> bool:
        return all(func(item) for func in filter_funcs)

    def all_modifiers(item: FeedItem) -> None:
        for func in modify_funcs:
            func(item)

    return ItemHooks(
        filter=all_filters if filter_funcs else None,
        modify=all_modifiers if modify_funcs else None,
    )


def _lookup(registry: dict, name: str, kind: str):
    try:
        return registry[name]
    except KeyError:
        known = ", ".join(sorted(registry))
        raise ConfigurationError(f"Unknown item {kind} {name!r} (known: {known})") from None
