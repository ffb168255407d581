"""Sleuth CLI -- terminal front end for the research agent.

This module is NEVER imported from sleuth/__init__.py.
It is only loaded via the ``sleuth`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

import click
from rich.logging import RichHandler

from sleuth.cli.formatting import format_error, get_console
from sleuth.runtime import open_runtime
from sleuth.settings import Settings

if TYPE_CHECKING:
    from rich.console import Console

    from sleuth.models.criteria import CriteriaSet
    from sleuth.orchestrator.loop import ResearchAgent
    from sleuth.orchestrator.models import ResearchResult

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr.

    ``--verbose`` shows everything at DEBUG. Otherwise sleuth logs at
    LOG_LEVEL (default INFO) and third-party libraries at WARNING.
    """
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    handler = RichHandler(console=get_console(stderr=True), show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
    root.addHandler(handler)

    if verbose:
        root.setLevel(logging.DEBUG)
        return
    root.setLevel(logging.WARNING)
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.getLogger("sleuth").setLevel(getattr(logging, level, logging.INFO))


@click.group()
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Load environment variables from this file instead of ./.env.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, env_file: str | None, verbose: bool) -> None:
    """Sleuth: criteria-driven research agent with persistent memory."""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = Settings.from_env(env_file)
    ctx.obj.setdefault("runtime_factory", open_runtime)


def run_interruptibly(
    agent: ResearchAgent,
    task: str,
    criteria: CriteriaSet,
    console: Console,
) -> ResearchResult:
    """Run the agent in a worker thread; Ctrl-C asks it to stop.

    The worker finishes its current step, persists any partial work and
    returns a stopped result.
    """
    outcome: dict[str, object] = {}

    def _target() -> None:
        try:
            outcome["result"] = agent.run(task, criteria)
        except Exception as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_target, name="sleuth-research", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.2)
    except KeyboardInterrupt:
        console.print("[yellow]Stopping after the current step...[/yellow]")
        agent.stop()
        worker.join()

    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["result"]  # type: ignore[return-value]


def fail(message: str, console: Console) -> None:
    """Print an error and exit with status 1."""
    format_error(message, console)
    raise SystemExit(1)


# Register subcommands after cli group is defined
from sleuth.cli.commands.ask import ask  # noqa: E402
from sleuth.cli.commands.memory import memory  # noqa: E402
from sleuth.cli.commands.run import run  # noqa: E402

cli.add_command(run)
cli.add_command(ask)
cli.add_command(memory)
