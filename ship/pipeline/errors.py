from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StepErrorKind = Literal[
    "tool_missing",
    "invalid_input",
    "requirement_failed",
    "build_failed",
    "publish_failed",
    "release_failed",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class StepError:
    kind: StepErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PlanError:
    """The requested target graph cannot be scheduled."""

    message: str
    hint: str | None = None
