"""Entry point for the usage tracker: API server and terminal views."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.config import settings
from src.session_stats.aggregator import aggregate_sessions, top_session_records
from src.session_stats.models import SessionRecord
from src.usage_tracker.client import UsageClient
from src.usage_tracker.display import (
    format_delta,
    format_tokens,
    time_until_reset,
    utilization_level,
)
from src.usage_tracker.models import (
    FetchOutcome,
    UsageAvailability,
    UsageEvent,
    UsageSnapshot,
)
from src.usage_tracker.poller import UsagePoller

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)

_LEVEL_STYLES = {"normal": "green", "warning": "yellow", "critical": "bold red"}

_sessions_adapter = TypeAdapter(list[SessionRecord])


# ── Rendering ────────────────────────────────────────────────────────────────


def usage_table(snapshot: UsageSnapshot) -> Table:
    """One row per usage window, colored by how full it is."""
    table = Table(title="Subscription usage")
    table.add_column("Window")
    table.add_column("Used", justify="right")
    table.add_column("Resets in", justify="right")

    rows = [("5-hour", snapshot.five_hour), ("Weekly", snapshot.seven_day)]
    if snapshot.seven_day_opus is not None:
        rows.append(("Weekly Opus", snapshot.seven_day_opus))

    for label, window in rows:
        style = _LEVEL_STYLES[utilization_level(window.utilization)]
        table.add_row(
            label,
            f"[{style}]{window.utilization:.0f}%[/{style}]",
            time_until_reset(window.resets_at) or "-",
        )
    return table


def stats_table(top: list[SessionRecord]) -> Table:
    table = Table(title="Top sessions by 5-hour usage")
    table.add_column("Session")
    table.add_column("5-hour", justify="right")
    table.add_column("Weekly", justify="right")
    table.add_column("Tokens", justify="right")

    for session in top:
        usage = session.token_usage
        delta = session.usage_delta
        table.add_row(
            session.name or session.id,
            format_delta(delta.five_hour_delta) if delta else "-",
            format_delta(delta.seven_day_delta) if delta else "-",
            format_tokens(usage.total_tokens) if usage else "-",
        )
    return table


# ── Session files ────────────────────────────────────────────────────────────


def load_sessions(path: Path) -> list[SessionRecord]:
    """Read session records from a JSON list or a ``{"sessions": [...]}`` object."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("sessions", [])
    return _sessions_adapter.validate_python(data)


# ── Commands ─────────────────────────────────────────────────────────────────


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting Usage Tracker API Server", style="bold green"))
    uvicorn.run(
        "src.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def run_usage() -> int:
    """Fetch usage once and print it."""
    with console.status("[bold green]Fetching usage..."):
        result = asyncio.run(UsageClient().fetch())

    if result.outcome is FetchOutcome.SNAPSHOT and result.snapshot is not None:
        console.print(usage_table(result.snapshot))
        return 0
    if result.outcome is FetchOutcome.NOT_ELIGIBLE:
        console.print(
            "[yellow]Usage data is only available for subscription (Pro/Max) accounts."
            " Sign in with OAuth to see it.[/yellow]"
        )
        return 0
    console.print(f"[red]Could not fetch usage ({result.outcome.value}): {result.detail}[/red]")
    return 1


def _print_event(event: UsageEvent) -> None:
    state = event.state
    if state.snapshot is not None:
        console.print(usage_table(state.snapshot))
    elif state.availability is UsageAvailability.UNAVAILABLE:
        console.print("[yellow]Usage not available for this account.[/yellow]")


async def _watch(interval: float) -> None:
    poller = UsagePoller(UsageClient(), interval=interval)
    poller.subscribe(_print_event)
    poller.start()
    try:
        await asyncio.Event().wait()
    finally:
        await poller.aclose()


def run_watch(interval: float) -> None:
    """Poll until interrupted, printing whenever usage changes."""
    console.print(Panel(f"Watching usage every {interval:.0f}s (Ctrl-C to stop)", style="bold blue"))
    try:
        asyncio.run(_watch(interval))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


def run_stats(path: Path, limit: int | None) -> int:
    """Aggregate a session file and print the summary."""
    try:
        sessions = load_sessions(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Could not load sessions from {path}: {e}[/red]")
        return 1

    stats = aggregate_sessions(sessions, limit=limit)
    top = top_session_records(sessions, limit=limit)

    console.print(Panel(
        f"Sessions: {stats.total_sessions} ({stats.sessions_with_usage} with usage data)\n"
        f"5-hour usage: {format_delta(stats.total_five_hour_delta)}\n"
        f"Weekly usage: {format_delta(stats.total_seven_day_delta)}\n"
        f"Total tokens: {format_tokens(stats.total_tokens)}",
        title="Session statistics",
    ))
    if top:
        console.print(stats_table(top))
    else:
        console.print("[dim]No session usage data yet.[/dim]")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Subscription usage tracker")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the API server")
    sub.add_parser("usage", help="Fetch and print current usage once")

    watch_parser = sub.add_parser("watch", help="Poll usage and print changes")
    watch_parser.add_argument(
        "--interval", type=float, default=float(settings.usage_poll_interval),
        help="Seconds between fetches",
    )

    stats_parser = sub.add_parser("stats", help="Summarize session usage from a JSON file")
    stats_parser.add_argument("file", type=Path, help="JSON file with session records")
    stats_parser.add_argument("--limit", type=int, default=None, help="Number of top sessions")

    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server()
    elif args.command == "usage":
        sys.exit(run_usage())
    elif args.command == "watch":
        run_watch(args.interval)
    elif args.command == "stats":
        sys.exit(run_stats(args.file, args.limit))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
