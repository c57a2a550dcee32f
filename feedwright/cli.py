"""
Command-line interface for feedwright.

Uses Typer to provide the ``run``, ``list-sources`` and ``state`` commands.
Supports loading .env files for settings such as the tracker token.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, load_config
from .core.errors import FeedwrightError
from .output import FORMATS
from .runner import run_sources
from .sources import available_sources, default_sources
from .state import StateStore

app = typer.Typer(add_completion=False, help="Turn pages and APIs without feeds into feeds.")
console = Console()


def _load(config: Path | None) -> AppConfig:
    load_dotenv()
    try:
        cfg = load_config(str(config) if config else None)
    except FeedwrightError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc
    token = os.environ.get("FEEDWRIGHT_PROJECT_ZERO_TOKEN")
    if token and not cfg.sources.project_zero_token:
        cfg.sources.project_zero_token = token
    return cfg


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    source: list[str] | None = typer.Option(
        None, "--source", "-s", help="Source to run (repeatable). Defaults to all configured."
    ),
    fmt: str | None = typer.Option(None, "--format", "-f", help="Output format: rss, atom, or json."),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Feed output directory."),
    workdir: Path | None = typer.Option(None, "--workdir", "-w", help="State directory."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Fetch each source and write its feed file.

    Exits with status 1 if any source failed; the others are still written.
    """
    cfg = _load(config)

    if fmt:
        if fmt.lower() not in FORMATS:
            raise typer.BadParameter(f"expected one of {', '.join(FORMATS)}", param_hint="--format")
        cfg.output.format = fmt.lower()
    if output_dir is not None:
        cfg.output.directory = str(output_dir)
    if workdir is not None:
        cfg.state.workdir = str(workdir)
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    names = list(source) if source else default_sources(cfg)
    if not names:
        console.print("No sources configured.")
        raise typer.Exit(code=1)

    results = run_sources(names, cfg, console=console)
    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


@app.command("list-sources")
def list_sources(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """List every source name that ``run --source`` accepts."""
    cfg = _load(config)
    enabled = set(default_sources(cfg))
    table = Table()
    table.add_column("Source")
    table.add_column("Kind")
    table.add_column("Default")
    for name, kind in sorted(available_sources(cfg).items()):
        table.add_row(name, kind, "yes" if name in enabled else "")
    console.print(table)


@app.command()
def state(
    key: str = typer.Argument(..., help="State key, e.g. projectzero or syzbot."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    workdir: Path | None = typer.Option(None, "--workdir", "-w", help="State directory."),
):
    """Print the persisted state blob for a source."""
    cfg = _load(config)
    store = StateStore(workdir if workdir is not None else Path(cfg.state.workdir))
    try:
        blob = store.load(key)
    except FeedwrightError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print_json(json.dumps(blob.to_dict()))


if __name__ == "__main__":
    app()
