"""sleuth ask -- research a free-text request."""

from __future__ import annotations

import click
import httpx
from rich.markup import escape

from sleuth.cli.commands.run import build_config
from sleuth.cli.formatting import format_criteria, format_result, format_warning, get_console
from sleuth.exceptions import SleuthError
from sleuth.parsing import parse_request


@click.command()
@click.argument("text")
@click.option("--max-iterations", type=click.IntRange(min=1), default=10, show_default=True, help="Iteration cap.")
@click.option("--export-dir", type=click.Path(file_okay=False), default=None, help="Append CSV reports to this directory.")
@click.pass_context
def ask(ctx: click.Context, text: str, max_iterations: int, export_dir: str | None) -> None:
    """Parse criteria out of TEXT, show them, then research."""
    from sleuth.cli import fail, run_interruptibly

    console = get_console()
    settings = ctx.obj["settings"]
    factory = ctx.obj["runtime_factory"]
    try:
        with factory(settings, build_config(max_iterations, console), export_dir=export_dir) as rt:
            parsed = parse_request(text, rt.generator)
            if parsed.used_fallback:
                format_warning(
                    f"Could not parse criteria ({parsed.fallback_reason}); using generic defaults.",
                    console,
                )
            console.print(f"[bold]Task:[/bold] {escape(parsed.task)}")
            format_criteria(parsed.criteria, console)
            result = run_interruptibly(rt.agent, parsed.task, parsed.criteria, console)
    except (SleuthError, httpx.HTTPError) as exc:
        fail(str(exc), console)
    format_result(result, console)
