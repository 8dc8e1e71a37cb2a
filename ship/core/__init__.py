"""Core domain types: results, exit codes, parameters, build root."""

from .config import (
    BuildConfig,
    BuildParameters,
    ConfigError,
    Configuration,
    load_parameters,
    resolve_config,
)
from .errors import ErrorCode
from .result import Err, Ok, Result
from .workspace import Workspace, WorkspaceError, detect_workspace

__all__ = [
    # config
    "BuildConfig",
    "BuildParameters",
    "ConfigError",
    "Configuration",
    "load_parameters",
    "resolve_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # workspace
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
]
