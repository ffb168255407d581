"""Rich formatting helpers for the Sleuth CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

if TYPE_CHECKING:
    from sleuth.models.criteria import CriteriaSet
    from sleuth.models.memory import MemoryDocument, MemoryStats
    from sleuth.orchestrator.models import ResearchResult


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def format_criteria(criteria: CriteriaSet, console: Console) -> None:
    """Display the criteria checklist for a session."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Kind", style="cyan", width=6)
    table.add_column("Weight", justify="right", style="green")
    table.add_column("Criterion")

    for c in criteria.hard:
        table.add_row("HARD", "-", f"{escape(c.description)} [dim]({escape(c.field)})[/dim]")
    for c in criteria.soft:
        table.add_row("SOFT", f"{c.weight}/5", escape(c.description))

    console.print(table)


def format_result(result: ResearchResult, console: Console) -> None:
    """Display the final report and run statistics."""
    console.print(Rule(f"Research {result.state.value}"))
    console.print(escape(result.answer), highlight=False)
    console.print()

    stats = Table(show_header=False, box=None, pad_edge=False)
    stats.add_column("Key", style="dim")
    stats.add_column("Value")
    stats.add_row("Iterations", str(result.iterations))
    stats.add_row("Tool calls", str(result.tool_calls))
    stats.add_row("Candidates", str(result.candidates_evaluated))
    if result.failed_steps:
        stats.add_row("Failed calls", f"[red]{len(result.failed_steps)}[/red]")
    if result.cost is not None:
        stats.add_row(
            "Cost",
            f"${result.cost.estimated_usd:.3f} "
            f"({result.cost.input_tokens} in + {result.cost.output_tokens} out)",
        )
    if result.session_id:
        stats.add_row("Session", result.session_id)
    if result.export_ref:
        stats.add_row("Export", escape(result.export_ref))
    console.print(stats)


def format_stats(stats: MemoryStats, console: Console) -> None:
    """Display memory store statistics."""
    console.print(f"Sessions: [green]{stats.sessions}[/green]")
    console.print(f"Known services: [green]{stats.services}[/green]")
    if stats.last_research is not None:
        console.print(f"Last research: {stats.last_research.strftime('%Y-%m-%d %H:%M')}")
    else:
        console.print("[dim]No research yet.[/dim]")


def format_recent_sessions(doc: MemoryDocument, console: Console, limit: int = 5) -> None:
    """Display the most recent sessions, newest first."""
    sessions = doc.sessions[-limit:][::-1]
    if not sessions:
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Date", style="dim")
    table.add_column("Status", style="cyan")
    table.add_column("Best match", style="green")
    table.add_column("Task")

    for s in sessions:
        table.add_row(
            s.timestamp.strftime("%Y-%m-%d %H:%M"),
            s.status.value,
            escape(s.best_match or "-"),
            escape(s.task[:80]),
        )
    console.print(table)


def format_warning(message: str, console: Console) -> None:
    """Display a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
