"""Sequential pipeline execution.

run_plan() visits planned targets in order:

1. Every target that is neither skipped nor gated off by `only_when` has its
   `requires` checked first; one unmet requirement fails the run before any
   target executes.
2. Targets then execute one at a time. A skipped target is not a failure.
   The first Err marks that target FAILED and every later target NOT_RUN.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from ship.core.result import Err
from ship.output.console import ConsoleProtocol, Style
from ship.pipeline.errors import StepError
from ship.pipeline.plan import ExecutionPlan
from ship.pipeline.target import Target, TargetOutcome, TargetStatus

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class PipelineReport:
    outcomes: tuple[TargetOutcome, ...]
    duration_seconds: float

    @property
    def succeeded(self) -> bool:
        return all(
            o.status in (TargetStatus.SUCCEEDED, TargetStatus.SKIPPED) for o in self.outcomes
        )

    @property
    def failed(self) -> TargetOutcome | None:
        return next((o for o in self.outcomes if o.status is TargetStatus.FAILED), None)


def _skip_reason(plan: ExecutionPlan, target: Target) -> str | None:
    if plan.is_skipped(target):
        return "skipped by request"
    unmet = target.first_unmet_condition()
    if unmet is not None:
        return f"condition false: {unmet.description}"
    return None


def _not_run(targets: list[Target]) -> list[TargetOutcome]:
    return [TargetOutcome(name=t.name, status=TargetStatus.NOT_RUN) for t in targets]


def run_plan(
    plan: ExecutionPlan,
    *,
    console: ConsoleProtocol,
    clock: Clock = time.monotonic,
) -> PipelineReport:
    started = clock()
    targets = list(plan.targets)

    # Conditions are static: evaluate them once, before anything runs
    skip_reasons = {t.name: _skip_reason(plan, t) for t in targets}

    for index, t in enumerate(targets):
        if skip_reasons[t.name] is not None:
            continue
        unmet = t.first_unmet_requirement()
        if unmet is None:
            continue
        error = StepError(
            kind="requirement_failed",
            message=f"target '{t.name}' requires: {unmet.description}",
        )
        console.error(error.message)
        outcomes = [
            *_not_run(targets[:index]),
            TargetOutcome(name=t.name, status=TargetStatus.FAILED, error=error),
            *_not_run(targets[index + 1 :]),
        ]
        return PipelineReport(outcomes=tuple(outcomes), duration_seconds=clock() - started)

    outcomes: list[TargetOutcome] = []
    for index, t in enumerate(targets):
        reason = skip_reasons[t.name]
        if reason is not None:
            console.print(f"{t.name}: {reason}", Style.DIM)
            outcomes.append(TargetOutcome(name=t.name, status=TargetStatus.SKIPPED, reason=reason))
            continue

        console.header(t.name)
        t0 = clock()
        result = t.action()
        elapsed = clock() - t0

        if isinstance(result, Err):
            error = result.error
            console.error(f"target '{t.name}' failed: {error.message}")
            if error.hint:
                console.print(f"hint: {error.hint}", Style.DIM)
            outcomes.append(
                TargetOutcome(
                    name=t.name,
                    status=TargetStatus.FAILED,
                    duration_seconds=elapsed,
                    error=error,
                )
            )
            outcomes.extend(_not_run(targets[index + 1 :]))
            break

        outcomes.append(
            TargetOutcome(name=t.name, status=TargetStatus.SUCCEEDED, duration_seconds=elapsed)
        )

    return PipelineReport(outcomes=tuple(outcomes), duration_seconds=clock() - started)


def _format_duration(seconds: float) -> str:
    if seconds < 1.0:
        return "< 1s"
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def print_summary(report: PipelineReport, *, console: ConsoleProtocol) -> None:
    rows = [
        [o.name, str(o.status), _format_duration(o.duration_seconds) if o.duration_seconds else ""]
        for o in report.outcomes
    ]
    rows.append(["Total", "", _format_duration(report.duration_seconds)])
    console.newline()
    console.table("Summary", ["Target", "Status", "Duration"], rows)

    failed = report.failed
    if failed is None:
        console.success(f"Build succeeded ({_format_duration(report.duration_seconds)})")
    else:
        console.error(f"Build failed in target '{failed.name}'")
