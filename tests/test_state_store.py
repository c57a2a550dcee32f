import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from feedwright.core.errors import ParseError, StateIOError
from feedwright.core.reconcile import KnownEntry, ReconciliationState
from feedwright.state import StateStore, state_path


def _state() -> ReconciliationState:
    return ReconciliationState(
        known={"42": KnownEntry({"summary": "heap overflow"}, datetime(2024, 2, 3, tzinfo=timezone.utc))},
        recent=["42"],
    )


def test_state_path_naming(tmp_path: Path):
    assert state_path(tmp_path, "projectzero") == tmp_path / "projectzero.state.json"


def test_missing_state_loads_empty(tmp_path: Path):
    state = StateStore(tmp_path / "nowhere").load("syzbot")
    assert state.known == {}
    assert state.recent == []


def test_save_then_load(tmp_path: Path):
    store = StateStore(tmp_path / "workdir")
    path = store.save("projectzero", _state())

    assert path == tmp_path / "workdir" / "projectzero.state.json"
    assert store.load("projectzero") == _state()
    assert json.loads(path.read_text(encoding="utf-8"))["recent"] == ["42"]


def test_save_leaves_no_temp_files(tmp_path: Path):
    store = StateStore(tmp_path)
    store.save("a", _state())
    store.save("a", ReconciliationState())
    assert [p.name for p in tmp_path.iterdir()] == ["a.state.json"]
    assert store.load("a").known == {}


def test_keys_are_independent(tmp_path: Path):
    store = StateStore(tmp_path)
    store.save("one", _state())
    assert store.load("two").known == {}


def test_malformed_json_is_parse_error(tmp_path: Path):
    (tmp_path / "bad.state.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ParseError):
        StateStore(tmp_path).load("bad")


def test_wrong_shape_is_parse_error(tmp_path: Path):
    (tmp_path / "bad.state.json").write_text('{"known": {"1": {}}}', encoding="utf-8")
    with pytest.raises(ParseError):
        StateStore(tmp_path).load("bad")


def test_unreadable_state_is_io_error(tmp_path: Path):
    (tmp_path / "dir.state.json").mkdir()
    with pytest.raises(StateIOError):
        StateStore(tmp_path).load("dir")


def test_unwritable_workdir_is_io_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(StateIOError):
        StateStore(blocker / "workdir").save("x", _state())
