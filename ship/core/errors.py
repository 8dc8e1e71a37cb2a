"""Process exit codes for the pipeline CLI.

The numeric values are part of the CI contract and should remain stable:
- 0: every scheduled target succeeded or was skipped
- 1: user error (unknown target, bad parameter)
- 2: environment error (dotnet/gh/gitversion missing, no repository)
- 3: build error (clean, restore, compile or pack failed)
- 4: network error (package push or release API failed)
- 5: I/O error (artifacts or changelog unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
