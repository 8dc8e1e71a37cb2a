"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from ship.core.errors import ErrorCode
from ship.pipeline.errors import StepErrorKind


def step_error_code(kind: StepErrorKind) -> ErrorCode:
    """Map the failing step's error kind to a process exit code."""
    if kind == "tool_missing":
        return ErrorCode.ENV_ERROR
    if kind in {"invalid_input", "requirement_failed"}:
        return ErrorCode.USER_ERROR
    if kind in {"publish_failed", "release_failed"}:
        return ErrorCode.NETWORK_ERROR
    if kind == "io_failed":
        return ErrorCode.IO_ERROR
    return ErrorCode.BUILD_ERROR


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
