"""
JSON file persistence for reconciliation state.

Each source owns one blob at ``<workdir>/<key>.state.json``. A missing file
is a valid first run and loads as empty state. Writes go through a temporary
file in the same directory so a crash never leaves a truncated blob behind.

The store does not coordinate concurrent writers; callers must serialize
runs that share a key.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile

from ..core.errors import ParseError, StateIOError
from ..core.reconcile import ReconciliationState

logger = logging.getLogger(__name__)


def state_path(workdir: Path, key: str) -> Path:
    """Return the state file path for a source key."""
    return workdir / f"{key}.state.json"


class StateStore:
    """Loads and saves ReconciliationState blobs under one working directory.

    Attributes:
        workdir: Directory holding the ``*.state.json`` files
    """

    def __init__(self, workdir: Path):
        self.workdir = Path(workdir)

    def path(self, key: str) -> Path:
        return state_path(self.workdir, key)

    def load(self, key: str) -> ReconciliationState:
        """Load state for ``key``.

        Returns:
            The persisted state, or an empty state if nothing is stored yet

        Raises:
            ParseError: If the file exists but is not valid state JSON
            StateIOError: If the file exists but cannot be read
        """
        path = self.path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No state for %s; starting empty", key)
            return ReconciliationState()
        except OSError as exc:
            raise StateIOError(f"Unable to read state {path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed state file {path}: {exc}") from exc
        return ReconciliationState.from_dict(data)

    def save(self, key: str, state: ReconciliationState) -> Path:
        """Persist state for ``key`` atomically.

        Raises:
            StateIOError: If the directory or file cannot be written
        """
        path = self.path(key)
        try:
            self.workdir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=str(self.workdir)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(state.to_dict(), handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StateIOError(f"Unable to write state {path}: {exc}") from exc
        logger.debug("Saved state for %s (%d known)", key, len(state.known))
        return path
