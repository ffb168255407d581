"""sleuth run -- research a task against explicit criteria."""

from __future__ import annotations

import json
from pathlib import Path

import click
import httpx
from pydantic import ValidationError
from rich.markup import escape

from sleuth.cli.formatting import format_criteria, format_result, get_console
from sleuth.exceptions import SleuthError
from sleuth.models.criteria import CriteriaSet, HardCriterion, SoftCriterion
from sleuth.orchestrator.config import AgentConfig


def parse_hard(values: tuple[str, ...]) -> list[HardCriterion]:
    """Parse ``field=description`` options into hard criteria."""
    result = []
    for i, value in enumerate(values, 1):
        field, sep, description = value.partition("=")
        if not sep:
            field, description = f"hard_{i}", value
        field, description = field.strip(), description.strip()
        if not field or not description:
            raise click.BadParameter(f"expected field=description, got {value!r}", param_hint="--hard")
        result.append(HardCriterion(field=field, description=description))
    return result


def parse_soft(values: tuple[str, ...]) -> list[SoftCriterion]:
    """Parse ``weight:description`` options into soft criteria.

    The weight prefix is optional and defaults to 3.
    """
    result = []
    for value in values:
        prefix, sep, rest = value.partition(":")
        if sep and prefix.strip().isdigit():
            weight, description = int(prefix), rest.strip()
        else:
            weight, description = 3, value.strip()
        if not 1 <= weight <= 5:
            raise click.BadParameter(f"weight must be 1-5, got {weight}", param_hint="--soft")
        if not description:
            raise click.BadParameter(f"empty description in {value!r}", param_hint="--soft")
        result.append(SoftCriterion(description=description, weight=weight))
    return result


def load_criteria_file(path: str) -> CriteriaSet:
    """Read a JSON criteria document: ``{"hard": [...], "soft": [...]}``."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return CriteriaSet.model_validate(data.get("criteria", data))
    except (OSError, ValueError, AttributeError) as exc:
        # ValidationError is a ValueError
        raise click.BadParameter(str(exc), param_hint="--criteria-file") from exc


def build_config(max_iterations: int, console) -> AgentConfig:
    """AgentConfig that echoes progress lines to the console."""
    return AgentConfig(
        max_iterations=max_iterations,
        on_progress=lambda message: console.print(f"[dim]{escape(message)}[/dim]"),
    )


def research(ctx: click.Context, task: str, criteria: CriteriaSet, max_iterations: int, export_dir: str | None, console) -> None:
    """Run one session through the configured runtime and print the report."""
    from sleuth.cli import fail, run_interruptibly

    settings = ctx.obj["settings"]
    factory = ctx.obj["runtime_factory"]
    try:
        with factory(settings, build_config(max_iterations, console), export_dir=export_dir) as rt:
            result = run_interruptibly(rt.agent, task, criteria, console)
    except (SleuthError, httpx.HTTPError) as exc:
        fail(str(exc), console)
    format_result(result, console)


@click.command()
@click.argument("task")
@click.option("--hard", "hard", multiple=True, metavar="FIELD=DESCRIPTION", help="Hard criterion (repeatable).")
@click.option("--soft", "soft", multiple=True, metavar="WEIGHT:DESCRIPTION", help="Soft criterion, weight 1-5 (repeatable).")
@click.option("--criteria-file", type=click.Path(exists=True, dir_okay=False), default=None, help="JSON file with hard and soft criteria.")
@click.option("--max-iterations", type=click.IntRange(min=1), default=10, show_default=True, help="Iteration cap.")
@click.option("--export-dir", type=click.Path(file_okay=False), default=None, help="Append CSV reports to this directory.")
@click.pass_context
def run(
    ctx: click.Context,
    task: str,
    hard: tuple[str, ...],
    soft: tuple[str, ...],
    criteria_file: str | None,
    max_iterations: int,
    export_dir: str | None,
) -> None:
    """Research TASK against explicit hard and soft criteria."""
    from sleuth.cli import fail

    console = get_console()
    base = load_criteria_file(criteria_file) if criteria_file else CriteriaSet()
    try:
        criteria = CriteriaSet(
            hard=(*base.hard, *parse_hard(hard)),
            soft=(*base.soft, *parse_soft(soft)),
        )
    except ValidationError as exc:
        fail(str(exc), console)

    if not criteria.is_complete():
        fail("At least one hard and one soft criterion are required.", console)

    format_criteria(criteria, console)
    research(ctx, task, criteria, max_iterations, export_dir, console)
