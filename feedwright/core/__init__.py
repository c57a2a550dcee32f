"""
Core extraction and reconciliation engine.

This package is independent of any particular upstream source: selectors
and field extraction turn markup into records, reconciliation tracks what
has been seen across runs, and the assembler applies item hooks.
"""

from .assembler import ItemHooks, assemble, hooks_from_names
from .errors import (
    ConfigurationError,
    FeedwrightError,
    OutputError,
    ParseError,
    StateIOError,
    TransportError,
)
from .extractor import FieldMap, extract, normalize_link
from .reconcile import Policy, ReconcileResult, ReconciliationState, reconcile
from .selectors import Selector, compile_selector, match_all, match_first
from .types import ExtractedRecord, Feed, FeedItem, FieldIssue

__all__ = [
    "ConfigurationError",
    "ExtractedRecord",
    "Feed",
    "FeedItem",
    "FeedwrightError",
    "FieldIssue",
    "FieldMap",
    "ItemHooks",
    "OutputError",
    "ParseError",
    "Policy",
    "ReconcileResult",
    "ReconciliationState",
    "Selector",
    "StateIOError",
    "TransportError",
    "assemble",
    "compile_selector",
    "extract",
    "hooks_from_names",
    "match_all",
    "match_first",
    "normalize_link",
    "reconcile",
]
