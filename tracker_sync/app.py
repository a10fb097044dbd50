"""Typer CLI entrypoint for tracker-sync."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, TrackerSettingsStore, UpdateInterval
from .engine import SourceFetcher
from .exceptions import TrackerSyncError
from .infra import Aria2OptionClient
from .logging_conf import configure_logging, tail_log
from .orchestrator import TrackerOrchestrator, UpdateSummary
from .scheduler import TrackerScheduler

app = typer.Typer(
    help="Keep aria2's bt-tracker list in sync with remote tracker lists.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
source_app = typer.Typer(
    name="source",
    help="Manage tracker list sources.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect log files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    settings: TrackerSettingsStore
    fetcher: SourceFetcher
    options: Aria2OptionClient
    scheduler: TrackerScheduler
    orchestrator: TrackerOrchestrator


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    config = repository.load()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    settings = TrackerSettingsStore(repository)
    fetcher = SourceFetcher(timeout=config.fetch_timeout)
    options = Aria2OptionClient(config.aria2)
    scheduler = TrackerScheduler(settings, startup_delay=config.startup_delay)
    orchestrator = TrackerOrchestrator(settings, options, fetcher, scheduler=scheduler)
    scheduler.bind(orchestrator.run_update)
    return AppState(
        repository=repository,
        settings=settings,
        fetcher=fetcher,
        options=options,
        scheduler=scheduler,
        orchestrator=orchestrator,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_timestamp(timestamp_ms: int | None) -> str:
    if not timestamp_ms:
        return "never"
    return datetime.fromtimestamp(timestamp_ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def _render_summary(summary: UpdateSummary) -> Table:
    table = Table(title="Tracker update", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Sources", str(summary.sources))
    table.add_row("Failed sources", str(summary.failed_sources))
    table.add_row("Fetched", str(summary.fetched))
    table.add_row("Added", str(summary.added))
    table.add_row("Total trackers", str(summary.total))
    table.add_row("Changed", "yes" if summary.changed else "no")
    return table


async def _close(state: AppState) -> None:
    await state.fetcher.aclose()
    await state.options.aclose()


async def _run_once(state: AppState) -> UpdateSummary:
    try:
        return await state.orchestrator.run_update()
    finally:
        await _close(state)


async def _serve(state: AppState) -> None:
    state.scheduler.start()
    state.scheduler.check_and_maybe_start()
    try:
        await asyncio.Event().wait()
    finally:
        state.scheduler.shutdown()
        await _close(state)


app.add_typer(source_app, name="source")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.")
) -> None:
    ctx.obj = build_state(verbose)


@app.command("update", help="Fetch all sources and merge them into aria2 now.")
def update(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        summary = asyncio.run(_run_once(state))
    except TrackerSyncError as exc:
        console.print(f"Tracker update failed: {exc}", style="red")
        raise typer.Exit(code=1) from exc
    console.print(_render_summary(summary))


@app.command("serve", help="Run the auto-update scheduler until interrupted.")
def serve(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    if not state.settings.get_tracker_auto_update():
        console.print("Auto-update is disabled; enable it with `tracker-sync auto --enable`.", style="yellow")
        raise typer.Exit(code=1)
    console.print("Scheduler running, press Ctrl+C to stop.", style="dim")
    try:
        asyncio.run(_serve(state))
    except KeyboardInterrupt:
        console.print("Scheduler stopped.", style="dim")


@app.command("status", help="Show auto-update settings and the last update time.")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    settings = state.settings.settings
    interval = settings.interval
    table = Table(title="Tracker auto-update", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Auto-update", "enabled" if settings.auto_update else "disabled")
    table.add_row("Interval", interval.value if interval else f"{settings.auto_update_interval} (unknown)")
    table.add_row("Last update", _format_timestamp(settings.last_update_time))
    if settings.auto_update and interval is not None:
        if state.scheduler.is_due(interval):
            next_due = "now"
        else:
            next_due = _format_timestamp(settings.last_update_time + interval.milliseconds)
        table.add_row("Next due", next_due)
    table.add_row("Sources", str(len(settings.sources)))
    console.print(table)


@app.command("auto", help="Enable or disable auto-update and pick its interval.")
def auto(
    ctx: typer.Context,
    enable: Optional[bool] = typer.Option(None, "--enable/--disable", help="Toggle auto-update."),
    interval: Optional[UpdateInterval] = typer.Option(None, "--interval", help="Update interval."),
) -> None:
    state = _get_state(ctx)
    if enable is None and interval is None:
        console.print("Nothing to change; pass --enable/--disable or --interval.", style="yellow")
        raise typer.Exit(code=1)
    if enable is not None:
        state.settings.set_tracker_auto_update(enable)
    if interval is not None:
        state.settings.set_tracker_auto_update_interval(interval)
    settings = state.settings.settings
    console.print(
        f"Auto-update {'enabled' if settings.auto_update else 'disabled'}, "
        f"interval {settings.auto_update_interval}.",
        style="green",
    )


@source_app.command("list", help="List configured tracker sources.")
def source_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    sources = state.settings.get_tracker_sources()
    if not sources:
        console.print("No tracker sources configured; add one with `tracker-sync source add`.", style="yellow")
        return
    table = Table(title=f"Tracker sources · {len(sources)}", box=box.SIMPLE_HEAD)
    table.add_column("#", style="dim", justify="right")
    table.add_column("URL", style="cyan", overflow="fold")
    for index, source in enumerate(sources, start=1):
        table.add_row(str(index), source)
    console.print(table)


@source_app.command("add", help="Add a tracker source URL.")
def source_add(ctx: typer.Context, url: str = typer.Argument(..., help="Tracker list URL.")) -> None:
    state = _get_state(ctx)
    if not url.strip().startswith(("http://", "https://")):
        console.print("Source must be an http(s) URL.", style="red")
        raise typer.Exit(code=1)
    if state.settings.add_tracker_source(url):
        console.print(f"Source added: {url.strip()}", style="green")
    else:
        console.print("Source already configured.", style="yellow")


@source_app.command("remove", help="Remove a tracker source URL.")
def source_remove(ctx: typer.Context, url: str = typer.Argument(..., help="Tracker list URL.")) -> None:
    state = _get_state(ctx)
    if state.settings.remove_tracker_source(url):
        console.print(f"Source removed: {url.strip()}", style="green")
    else:
        console.print("Source not found.", style="yellow")
        raise typer.Exit(code=1)


@log_app.command("show", help="Show the most recent log lines.")
def log_show(
    ctx: typer.Context,
    tail: int = typer.Option(100, "--tail", help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead."),
) -> None:
    state = _get_state(ctx)
    logs_dir = state.repository.locator.logs_dir
    path = logs_dir / ("error.log" if errors else "tracker_sync.log")
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
