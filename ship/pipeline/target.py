"""Target definitions.

A Target is a named unit of work with declared edges:

- depends_on: targets that must run (and succeed) first
- triggers: targets scheduled after this one whenever it is scheduled
- before: ordering only; if both are scheduled, this one runs first

Conditions:

- requires: must hold for the target to run; a false requirement fails the
  pipeline before any target executes
- only_when: evaluated up front; a false condition skips the target
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ship.core.result import Result
from ship.pipeline.errors import StepError

TargetAction = Callable[[], Result[None, StepError]]
Predicate = Callable[[], bool]


class TargetStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    NOT_RUN = "not run"


@dataclass(frozen=True, slots=True)
class Condition:
    """A named predicate, so failures can say which condition did not hold."""

    description: str
    check: Predicate

    def holds(self) -> bool:
        return bool(self.check())


@dataclass(frozen=True, slots=True)
class Target:
    name: str
    description: str
    action: TargetAction
    depends_on: tuple[str, ...] = ()
    triggers: tuple[str, ...] = ()
    before: tuple[str, ...] = ()
    requires: tuple[Condition, ...] = ()
    only_when: tuple[Condition, ...] = ()

    def first_unmet_condition(self) -> Condition | None:
        """Return the first only_when condition that does not hold."""
        for cond in self.only_when:
            if not cond.holds():
                return cond
        return None

    def first_unmet_requirement(self) -> Condition | None:
        for cond in self.requires:
            if not cond.holds():
                return cond
        return None


@dataclass(frozen=True, slots=True)
class TargetOutcome:
    name: str
    status: TargetStatus
    duration_seconds: float = 0.0
    reason: str | None = None
    error: StepError | None = None
