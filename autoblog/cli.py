"""
Command-line interface for autoblog.

Uses Typer to expose the scheduled run, a fetch-only preview, ledger
administration, and the HTTP debug server. Loads ``.env`` files for
credentials.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .core.types import RunResult
from .errors import AutoblogError
from .fetch.feed import FeedFetcher
from .ledger.ledger import Ledger
from .llm.tracing import flush
from .runner import build_ledger, run_pipeline
from .utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Summarize a blog feed into published JSON artifacts.")
ledger_app = typer.Typer(add_completion=False, help="Inspect or edit the dedup ledger.")
app.add_typer(ledger_app, name="ledger")
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")


def _load(config: Path | None, log_level: str | None = None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    return cfg


def _require_ledger(cfg: AppConfig) -> Ledger:
    ledger = build_ledger(cfg, setup_logging(cfg.logging))
    if ledger is None:
        console.print("[red]Ledger is disabled or unavailable[/red]")
        raise typer.Exit(code=1)
    return ledger


def _render_result(result: RunResult) -> None:
    table = Table(title="Run summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Fetched", str(result.fetched))
    table.add_row("New", str(result.new))
    table.add_row("Succeeded", f"[green]{result.succeeded}[/green]")
    table.add_row("Failed", f"[red]{result.failed}[/red]" if result.failed else "0")
    table.add_row("Duration", f"{result.duration_seconds:.2f}s")
    console.print(table)
    for failure in result.failures:
        console.print(f"[red]x[/red] {failure['title']}: {failure['error']}")


@app.command()
def run(
    config: Path | None = ConfigOption,
    feed_url: str | None = typer.Option(None, "--feed-url", help="Override the feed URL."),
    max_items: int | None = typer.Option(None, "--max-items", help="Cap on items per run."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    no_ledger: bool = typer.Option(False, "--no-ledger", help="Process every item, skipping dedup."),
    publisher: str | None = typer.Option(
        None, "--publisher", help="Content store backend: github or local."
    ),
):
    """Run one scheduled pass: fetch, filter, summarize, publish, mark."""
    cfg = _load(config, log_level)
    if feed_url:
        cfg.feed.url = feed_url
    if max_items is not None:
        cfg.feed.max_items_per_run = max_items
    if log_file is not None:
        cfg.logging.file = log_file
    if no_ledger:
        cfg.ledger.enabled = False
    if publisher:
        cfg.publisher.backend = publisher

    logger = setup_logging(cfg.logging)
    try:
        result = run_pipeline(cfg, datetime.now(timezone.utc), logger)
    except AutoblogError as exc:
        console.print(f"[bold red]Run aborted[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        flush()
    _render_result(result)


@app.command()
def fetch(
    config: Path | None = ConfigOption,
    max_items: int = typer.Option(3, "--max-items", help="Number of items to print."),
):
    """Fetch and parse the feed, printing records as JSON."""
    cfg = _load(config)
    logger = setup_logging(cfg.logging)
    try:
        records = FeedFetcher(cfg.feed, logger).fetch(max_items)
    except AutoblogError as exc:
        console.print(f"[bold red]Fetch failed[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))


@ledger_app.command("count")
def ledger_count(config: Path | None = ConfigOption):
    """Print the number of processed items."""
    ledger = _require_ledger(_load(config))
    typer.echo(str(ledger.count()))


@ledger_app.command("list")
def ledger_list(
    config: Path | None = ConfigOption,
    limit: int = typer.Option(1000, "--limit", help="Maximum guids to list."),
):
    """List processed guids."""
    ledger = _require_ledger(_load(config))
    for guid in ledger.list_all(limit):
        typer.echo(guid)


@ledger_app.command("forget")
def ledger_forget(
    guid: str = typer.Argument(..., help="Guid to reprocess on the next run."),
    config: Path | None = ConfigOption,
):
    """Delete a ledger entry so the item is processed again."""
    ledger = _require_ledger(_load(config))
    try:
        ledger.forget(guid)
    except AutoblogError as exc:
        console.print(f"[bold red]Forget failed[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"Forgot {guid}")


@app.command()
def serve(
    config: Path | None = ConfigOption,
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8787, "--port"),
):
    """Serve the HTTP debug endpoints."""
    import uvicorn

    from .server import create_app

    cfg = _load(config)
    setup_logging(cfg.logging)
    uvicorn.run(create_app(cfg), host=host, port=port)


if __name__ == "__main__":
    app()
