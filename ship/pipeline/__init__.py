"""Target graph, planning and sequential execution."""

from .driver import PipelineReport, print_summary, run_plan
from .errors import PlanError, StepError
from .plan import ExecutionPlan, build_plan
from .target import Condition, Target, TargetOutcome, TargetStatus

__all__ = [
    "Condition",
    "ExecutionPlan",
    "PipelineReport",
    "PlanError",
    "StepError",
    "Target",
    "TargetOutcome",
    "TargetStatus",
    "build_plan",
    "print_summary",
    "run_plan",
]
