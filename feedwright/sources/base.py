"""
Abstract base classes for feed sources.

Every upstream is a Source: it produces an ordered list of FeedItems and
wraps them into a Feed. Sources that remember what they have already seen
derive from StatefulSource, which loads, reconciles, and saves their state
through an explicitly supplied StateStore.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
import logging
from typing import Any, Iterable

from ..config import AppConfig
from ..core.assembler import NO_HOOKS, ItemHooks
from ..core.reconcile import Policy, ReconcileResult, TrackedRecord, reconcile
from ..core.types import Feed, FeedItem
from ..logging_utils import log_event
from ..state import StateStore

logger = logging.getLogger(__name__)


class Source(ABC):
    """A single upstream that can be turned into a feed.

    Attributes:
        name: Source name, also used for output file names
        title: Feed title
        link: Feed link (the human-facing upstream page)
        description: Optional feed description
    """

    name: str = ""
    title: str = ""
    link: str = ""
    description: str = ""

    def __init__(self, cfg: AppConfig, hooks: ItemHooks = NO_HOOKS):
        self.cfg = cfg
        self.hooks = hooks

    @abstractmethod
    def produce_items(self) -> list[FeedItem]:
        """Fetch the upstream and return the assembled items, in feed order.

        Raises:
            FeedwrightError: If the run cannot complete
        """
        raise NotImplementedError

    def feed(self) -> Feed:
        """Build the complete Feed for this run."""
        items = self.produce_items()
        return Feed(
            title=self.title,
            link=self.link,
            description=self.description,
            updated=datetime.now(timezone.utc),
            items=items,
        )


class StatefulSource(Source):
    """A source that reconciles its records against persisted state.

    Attributes:
        state_key: Name of this source's state blob in the store
    """

    state_key: str = ""

    def __init__(self, cfg: AppConfig, store: StateStore, hooks: ItemHooks = NO_HOOKS):
        super().__init__(cfg, hooks)
        self.store = store

    def reconcile_batch(
        self,
        batch: Iterable[TrackedRecord],
        policy: Policy,
        **kwargs: Any,
    ) -> ReconcileResult:
        """Load this source's state and fold ``batch`` into it (not saved yet)."""
        state = self.store.load(self.state_key)
        kwargs.setdefault("max_recent", self.cfg.state.max_recent)
        return reconcile(batch, state, policy, **kwargs)

    def commit(self, result: ReconcileResult) -> None:
        """Persist the reconciled state, but only if something new was seen."""
        if not result.changed:
            logger.debug("%s: no new records", self.name)
            return
        self.store.save(self.state_key, result.state)
        log_event(
            logger,
            f"{self.name}: {len(result.new_identities)} new record(s)",
            event="state_saved",
            source=self.name,
            new=result.new_identities,
        )
