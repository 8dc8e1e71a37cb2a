"""Plan and targets commands - inspect the target graph without running it."""

from __future__ import annotations

import typer

from ship.build import DEFAULT_TARGET, define_targets
from ship.cli.commands._helpers import exit_with_code
from ship.cli.context import build_context
from ship.core.config import BuildParameters
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.output.console import Style
from ship.pipeline.plan import build_plan


def plan(
    targets: list[str] | None = typer.Argument(
        None, help=f"Targets to plan (default: {DEFAULT_TARGET})", show_default=False
    ),
    skip: list[str] | None = typer.Option(
        None, "--skip", help="Target to leave out (repeatable)", show_default=False
    ),
    configuration: str | None = typer.Option(
        None, "--configuration", "-c", envvar="CONFIGURATION", help="Debug or Release"
    ),
) -> None:
    """Show the execution plan and which targets would be skipped."""
    ctx = build_context(BuildParameters(configuration=configuration))
    result = build_plan(
        define_targets(ctx.build_context()),
        targets or [DEFAULT_TARGET],
        skip=skip or [],
    )
    if isinstance(result, Err):
        ctx.console.error(result.error.message)
        if result.error.hint:
            ctx.console.print(f"targets: {result.error.hint}", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    execution = result.value
    ctx.console.header(f"Plan ({ctx.config.configuration}, branch {ctx.git.branch or '-'})")
    for index, t in enumerate(execution.targets, start=1):
        if execution.is_skipped(t):
            ctx.console.print(f"{index}. {t.name}  [skip: requested]", Style.DIM)
            continue
        unmet = t.first_unmet_condition()
        if unmet is not None:
            ctx.console.print(f"{index}. {t.name}  [skip: {unmet.description}]", Style.DIM)
            continue
        missing = t.first_unmet_requirement()
        if missing is not None:
            ctx.console.print(
                f"{index}. {t.name}  [fails: requires {missing.description}]", Style.WARNING
            )
            continue
        ctx.console.print(f"{index}. {t.name}")


def targets() -> None:
    """List targets with their descriptions and edges."""
    ctx = build_context(BuildParameters())
    rows: list[list[str]] = []
    for t in define_targets(ctx.build_context()):
        name = f"{t.name} (default)" if t.name == DEFAULT_TARGET else t.name
        edges: list[str] = []
        if t.depends_on:
            edges.append("depends on " + ", ".join(t.depends_on))
        if t.triggers:
            edges.append("triggers " + ", ".join(t.triggers))
        rows.append([name, t.description, "; ".join(edges)])
    ctx.console.table("Targets", ["Target", "Description", "Edges"], rows)
