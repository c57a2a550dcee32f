"""
Reconciliation of freshly fetched records against persisted state.

Sources that poll a listing repeatedly need to know which records they have
already seen and when each one was first observed. ``reconcile`` diffs a
batch against the ``known`` map, stamps new identities, folds them in, and
returns the identities to render, in order.

Two policies share that primitive:

- Policy.RECENT keeps a bounded most-recent-first list of discoveries and
  renders only that list. Records that vanish upstream are still rendered
  from stored fields until newer discoveries evict them.
- Policy.ALL renders every known identity, newest observation first, with a
  source-supplied tie-break for identical timestamps.

``known`` is never pruned, so an old identity is never reported as new again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import re
from typing import Any, Callable, Iterable, Protocol

from .errors import ParseError

DEFAULT_MAX_RECENT = 20

_DIGITS_RE = re.compile(r"\d+")


class TrackedRecord(Protocol):
    """Anything with a stable identity that can be stored in state.

    ``observed_at`` is a source-provided disclosure time, or None when the
    first observation by this system should be used instead.
    """

    @property
    def identity(self) -> str: ...

    @property
    def observed_at(self) -> datetime | None: ...

    def to_state(self) -> dict[str, Any]: ...


class Policy(str, Enum):
    RECENT = "recent"
    ALL = "all"


@dataclass
class KnownEntry:
    """Stored display fields plus the first-observation timestamp."""

    fields: dict[str, Any]
    observed_at: datetime


@dataclass
class ReconciliationState:
    """Persisted per-source state.

    Attributes:
        known: identity -> stored entry; only grows or is updated in place
        recent: most-recent-first identities (Policy.RECENT only)
    """

    known: dict[str, KnownEntry] = field(default_factory=dict)
    recent: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "known": {
                identity: {
                    "fields": entry.fields,
                    "observed_at": entry.observed_at.isoformat(),
                }
                for identity, entry in self.known.items()
            },
            "recent": list(self.recent),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReconciliationState:
        """Rebuild state from its JSON form.

        Raises:
            ParseError: If the structure or a timestamp is malformed
        """
        if not isinstance(data, dict):
            raise ParseError("State must be a JSON object")
        try:
            known = {
                str(identity): KnownEntry(
                    fields=dict(raw.get("fields") or {}),
                    observed_at=_parse_iso(raw["observed_at"]),
                )
                for identity, raw in (data.get("known") or {}).items()
            }
            recent = [str(identity) for identity in data.get("recent") or []]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Malformed state: {exc}") from exc
        return cls(known=known, recent=recent)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass.

    Attributes:
        state: The updated state (the input state is left untouched)
        identities: Identities to render, in output order
        changed: True iff at least one identity was inserted
        new_identities: Identities inserted this pass, in batch order
    """

    state: ReconciliationState
    identities: list[str]
    changed: bool
    new_identities: list[str] = field(default_factory=list)

    def entries(self) -> list[tuple[str, KnownEntry]]:
        """Pair each output identity with its stored entry."""
        return [(identity, self.state.known[identity]) for identity in self.identities]


def numeric_suffix_key(identity: str) -> tuple[tuple[int, ...], str]:
    """Tie-break key comparing the numeric parts of an identity.

    ``CVE-2021-1732`` sorts as (2021, 1732), so a later year or a higher
    sequence number wins when two records share an observation time.
    """
    return tuple(int(part) for part in _DIGITS_RE.findall(identity)), identity


def reconcile(
    batch: Iterable[TrackedRecord],
    state: ReconciliationState,
    policy: Policy,
    *,
    now: datetime | None = None,
    max_recent: int = DEFAULT_MAX_RECENT,
    tie_break: Callable[[str], Any] = numeric_suffix_key,
    restrict_to: Iterable[str] | None = None,
) -> ReconcileResult:
    """Fold ``batch`` into ``state`` and compute the output ordering.

    Args:
        batch: Records from the current fetch, in upstream order
        state: State loaded at the start of the run
        policy: Policy.RECENT or Policy.ALL
        now: Observation time for new identities (defaults to current UTC)
        max_recent: Cap for the recency list
        tie_break: Secondary sort key for Policy.ALL, applied descending
        restrict_to: For Policy.ALL, only render these identities

    Returns:
        ReconcileResult with the updated state and output identities
    """
    policy = Policy(policy)
    now = now or datetime.now(timezone.utc)
    known = dict(state.known)
    recent = list(state.recent)
    new_identities: list[str] = []

    for record in batch:
        identity = record.identity
        if identity in known:
            continue
        if policy is Policy.RECENT:
            observed = now
        else:
            observed = record.observed_at or now
        known[identity] = KnownEntry(fields=record.to_state(), observed_at=observed)
        new_identities.append(identity)
        if policy is Policy.RECENT:
            recent.insert(0, identity)

    if policy is Policy.RECENT:
        recent = recent[:max_recent]
        identities = [identity for identity in recent if identity in known]
    else:
        candidates = known.keys()
        if restrict_to is not None:
            allowed = set(restrict_to)
            candidates = [identity for identity in candidates if identity in allowed]
        identities = sorted(
            candidates,
            key=lambda identity: (known[identity].observed_at, tie_break(identity)),
            reverse=True,
        )

    return ReconcileResult(
        state=ReconciliationState(known=known, recent=recent),
        identities=identities,
        changed=bool(new_identities),
        new_identities=new_identities,
    )


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
