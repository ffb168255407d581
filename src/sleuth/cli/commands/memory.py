"""sleuth memory -- show what past research has recorded."""

from __future__ import annotations

import click

from sleuth.cli.formatting import format_recent_sessions, format_stats, get_console
from sleuth.memory.store import MemoryStore


@click.command()
@click.option("--recent", type=click.IntRange(min=0), default=5, show_default=True, help="Recent sessions to list.")
@click.pass_context
def memory(ctx: click.Context, recent: int) -> None:
    """Show memory statistics and the most recent sessions."""
    console = get_console()
    store = MemoryStore(ctx.obj["settings"].memory_path)
    console.print(f"[dim]{store.path}[/dim]")
    format_stats(store.stats(), console)
    if recent:
        format_recent_sessions(store.load(), console, limit=recent)
