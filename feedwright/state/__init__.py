"""
Durable per-source reconciliation state.
"""

from .store import StateStore, state_path

__all__ = ["StateStore", "state_path"]
