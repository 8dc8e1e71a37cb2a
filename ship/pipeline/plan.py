"""Execution planning for a target graph.

The plan is the closure of the requested targets over `depends_on` and
`triggers`, ordered topologically. Ties are broken by declaration order so
the same graph always yields the same plan. Targets named with `--skip` stay
in the plan (their dependencies still run) but are not executed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ship.core.result import Err, Ok, Result
from ship.pipeline.errors import PlanError
from ship.pipeline.target import Target


@dataclass(frozen=True, slots=True)
class ExecutionPlan:
    targets: tuple[Target, ...]
    skipped: frozenset[str] = frozenset()

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.targets]

    def is_skipped(self, target: Target) -> bool:
        return target.name.lower() in self.skipped


def _index(targets: Sequence[Target]) -> Result[dict[str, Target], PlanError]:
    by_name: dict[str, Target] = {}
    for t in targets:
        key = t.name.lower()
        if key in by_name:
            return Err(PlanError(f"duplicate target: {t.name}"))
        by_name[key] = t

    for t in targets:
        for edge in (*t.depends_on, *t.triggers, *t.before):
            if edge.lower() not in by_name:
                return Err(PlanError(f"target '{t.name}' references unknown target '{edge}'"))
    return Ok(by_name)


def build_plan(
    targets: Sequence[Target],
    requested: Iterable[str],
    *,
    skip: Iterable[str] = (),
) -> Result[ExecutionPlan, PlanError]:
    """Compute the ordered targets to visit for `requested`."""
    indexed = _index(targets)
    if isinstance(indexed, Err):
        return indexed
    by_name = indexed.value
    known = ", ".join(t.name for t in targets)

    skipped: set[str] = set()
    for name in skip:
        if name.lower() not in by_name:
            return Err(PlanError(f"unknown target to skip: {name}", hint=known))
        skipped.add(name.lower())

    pending: list[str] = []
    for name in requested:
        if name.lower() not in by_name:
            return Err(PlanError(f"unknown target: {name}", hint=known))
        pending.append(name.lower())
    if not pending:
        return Err(PlanError("no target requested", hint=known))

    scheduled: set[str] = set()
    while pending:
        key = pending.pop()
        if key in scheduled:
            continue
        scheduled.add(key)
        t = by_name[key]
        pending.extend(d.lower() for d in t.depends_on)
        pending.extend(d.lower() for d in t.triggers)

    # preds[v] holds every scheduled u that must run before v
    preds: dict[str, set[str]] = {key: set() for key in scheduled}
    for key in scheduled:
        t = by_name[key]
        for dep in t.depends_on:
            preds[key].add(dep.lower())
        for trig in t.triggers:
            preds[trig.lower()].add(key)
        for later in t.before:
            if later.lower() in scheduled:
                preds[later.lower()].add(key)

    order = [t.name.lower() for t in targets if t.name.lower() in scheduled]
    planned: list[Target] = []
    done: set[str] = set()
    while len(planned) < len(order):
        ready = next((k for k in order if k not in done and preds[k] <= done), None)
        if ready is None:
            cycle = [by_name[k].name for k in order if k not in done]
            return Err(PlanError(f"cycle between targets: {', '.join(cycle)}"))
        done.add(ready)
        planned.append(by_name[ready])

    return Ok(ExecutionPlan(targets=tuple(planned), skipped=frozenset(skipped)))
