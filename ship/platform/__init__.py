"""Process execution helpers."""

from .process import ProcessError, format_command, merged_env, run, run_streamed

__all__ = ["ProcessError", "format_command", "merged_env", "run", "run_streamed"]
