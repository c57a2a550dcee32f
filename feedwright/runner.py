"""
Run orchestration for feedwright.

Sources run one after another. Each one is built, produces its feed, and has
the feed written to ``<output.directory>/<name>.<ext>``. A source that fails
is logged and recorded, and the remaining sources still run.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import AppConfig
from .core.errors import FeedwrightError
from .logging_utils import log_event, setup_logging
from .output import output_path, write_feed
from .sources import build_source
from .state import StateStore


@dataclass
class SourceResult:
    """Outcome of running one source.

    Attributes:
        name: Source name
        ok: Whether a feed file was written
        path: Written file, if any
        items: Number of items in the written feed
        error: Error message for failed sources
    """

    name: str
    ok: bool
    path: Path | None = None
    items: int = 0
    error: str | None = None


def run_source(name: str, cfg: AppConfig, store: StateStore, logger: logging.Logger) -> SourceResult:
    """Run a single source; errors are caught and reported in the result."""
    try:
        source = build_source(name, cfg, store)
        feed = source.feed()
        path = write_feed(
            feed,
            output_path(Path(cfg.output.directory), name, cfg.output.format),
            cfg.output.format,
        )
    except FeedwrightError as exc:
        log_event(
            logger,
            f"{name}: {exc}",
            level=logging.ERROR,
            event="source_failed",
            source=name,
            error_type=type(exc).__name__,
        )
        return SourceResult(name=name, ok=False, error=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception(
            "%s: unexpected failure",
            name,
            extra={"event": "source_failed", "source": name, "error_type": type(exc).__name__},
        )
        return SourceResult(name=name, ok=False, error=f"{type(exc).__name__}: {exc}")

    log_event(
        logger,
        f"{name}: wrote {len(feed.items)} item(s) to {path}",
        event="source_done",
        source=name,
        items=len(feed.items),
        path=str(path),
    )
    return SourceResult(name=name, ok=True, path=path, items=len(feed.items))


def run_sources(
    names: list[str],
    cfg: AppConfig,
    console: Console | None = None,
) -> list[SourceResult]:
    """Run the named sources in order and print a summary table.

    Args:
        names: Source names, as accepted by ``build_source``
        cfg: Application configuration
        console: Rich console for the summary (no summary if None)

    Returns:
        One SourceResult per name, in the same order
    """
    output_dir = Path(cfg.output.directory)
    logger = setup_logging(cfg.logging, output_dir)
    store = StateStore(Path(cfg.state.workdir))

    log_event(
        logger,
        "Run start",
        event="run_start",
        sources=names,
        workdir=str(store.workdir),
        output=str(output_dir),
    )
    results = [run_source(name, cfg, store, logger) for name in names]
    failed = [r.name for r in results if not r.ok]
    log_event(
        logger,
        "Run complete",
        event="run_complete",
        succeeded=len(results) - len(failed),
        failed=failed,
    )

    if console is not None:
        console.print(summary_table(results))
    return results


def summary_table(results: list[SourceResult]) -> Table:
    table = Table(title="feedwright run")
    table.add_column("Source")
    table.add_column("Status")
    table.add_column("Items", justify="right")
    table.add_column("Output / Error")
    for result in results:
        if result.ok:
            table.add_row(result.name, "[green]ok[/green]", str(result.items), str(result.path))
        else:
            table.add_row(result.name, "[red]failed[/red]", "-", result.error or "")
    return table
