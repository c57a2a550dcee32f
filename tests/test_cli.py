from datetime import datetime, timezone
from pathlib import Path

from typer.testing import CliRunner

from feedwright import cli
from feedwright.core.reconcile import KnownEntry, ReconciliationState
from feedwright.runner import SourceResult
from feedwright.state import StateStore

runner = CliRunner()


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n  console: false\nsources:\n  config_dir: {}\n".format(tmp_path / "configs"),
        encoding="utf-8",
    )
    return path


def test_list_sources(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(cli.app, ["list-sources", "--config", str(_write_config(tmp_path))])
    assert result.exit_code == 0
    assert "syzbot" in result.output
    assert "apple_security" in result.output


def test_run_exits_nonzero_when_a_source_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    seen = {}

    def fake_run_sources(names, cfg, console=None):
        seen["names"] = names
        seen["format"] = cfg.output.format
        return [SourceResult("syzbot", ok=True, items=1), SourceResult("hackerone", ok=False, error="boom")]

    monkeypatch.setattr(cli, "run_sources", fake_run_sources)
    result = runner.invoke(
        cli.app,
        ["run", "--config", str(_write_config(tmp_path)), "-s", "syzbot", "-s", "hackerone", "--format", "json"],
    )

    assert result.exit_code == 1
    assert seen == {"names": ["syzbot", "hackerone"], "format": "json"}


def test_run_succeeds_when_all_sources_succeed(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "run_sources", lambda names, cfg, console=None: [SourceResult("syzbot", ok=True)])
    result = runner.invoke(cli.app, ["run", "--config", str(_write_config(tmp_path)), "-s", "syzbot"])
    assert result.exit_code == 0


def test_run_rejects_unknown_format(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(cli.app, ["run", "-s", "syzbot", "--format", "opml"])
    assert result.exit_code == 2


def test_state_prints_blob(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    store = StateStore(tmp_path / "workdir")
    store.save(
        "projectzero",
        ReconciliationState(
            known={"2201": KnownEntry({"summary": "OOB write"}, datetime(2024, 1, 1, tzinfo=timezone.utc))},
            recent=["2201"],
        ),
    )
    result = runner.invoke(cli.app, ["state", "projectzero", "--workdir", str(tmp_path / "workdir")])
    assert result.exit_code == 0
    assert "OOB write" in result.output
    assert "2201" in result.output
