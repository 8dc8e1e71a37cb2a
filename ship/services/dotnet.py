"""Thin wrapper over the dotnet CLI.

Each call echoes the command (secrets masked) and streams the tool's own
output; a non-zero exit becomes a StepError.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.pipeline.errors import StepError, StepErrorKind
from ship.platform.process import format_command, run_streamed
from ship.services.versioning import VersionInfo


@dataclass(frozen=True, slots=True)
class VersionStamps:
    """MSBuild properties stamped into assemblies and packages."""

    version: str
    assembly_version: str
    file_version: str
    informational_version: str

    @classmethod
    def from_version(cls, info: VersionInfo) -> VersionStamps:
        return cls(
            version=info.nuget_version_v2,
            assembly_version=info.assembly_sem_ver,
            file_version=info.assembly_sem_file_ver,
            informational_version=info.informational_version,
        )

    def as_properties(self) -> list[str]:
        return [
            f"-p:Version={self.version}",
            f"-p:AssemblyVersion={self.assembly_version}",
            f"-p:FileVersion={self.file_version}",
            f"-p:InformationalVersion={self.informational_version}",
        ]


class DotNet:
    """dotnet CLI bound to a working directory and a console."""

    def __init__(
        self,
        *,
        cwd: Path,
        console: ConsoleProtocol,
        executable: str = "dotnet",
    ) -> None:
        self.cwd = cwd
        self.console = console
        self.executable = executable

    def clean(self, project: Path) -> Result[None, StepError]:
        return self._exec(["clean", str(project)], kind="build_failed")

    def restore(self, project: Path) -> Result[None, StepError]:
        return self._exec(["restore", str(project)], kind="build_failed")

    def build(
        self,
        project: Path,
        *,
        configuration: str,
        stamps: VersionStamps,
        no_restore: bool = True,
    ) -> Result[None, StepError]:
        args = ["build", str(project), "--configuration", configuration]
        if no_restore:
            args.append("--no-restore")
        args.extend(stamps.as_properties())
        return self._exec(args, kind="build_failed")

    def pack(
        self,
        project: Path,
        *,
        configuration: str,
        output: Path,
        stamps: VersionStamps,
        copyright: str | None = None,
    ) -> Result[None, StepError]:
        args = [
            "pack",
            str(project),
            "--configuration",
            configuration,
            "--output",
            str(output),
            "--no-build",
            "--no-restore",
        ]
        args.extend(stamps.as_properties())
        if copyright:
            args.append(f"-p:Copyright={copyright}")
        return self._exec(args, kind="build_failed")

    def nuget_push(
        self,
        package: Path,
        *,
        source: str,
        api_key: str,
        skip_duplicate: bool = True,
    ) -> Result[None, StepError]:
        args = ["nuget", "push", str(package), "--source", source, "--api-key", api_key]
        if skip_duplicate:
            args.append("--skip-duplicate")
        return self._exec(args, kind="publish_failed", secrets=(api_key,))

    def _exec(
        self,
        args: list[str],
        *,
        kind: StepErrorKind,
        secrets: tuple[str, ...] = (),
    ) -> Result[None, StepError]:
        if shutil.which(self.executable) is None:
            return Err(
                StepError(
                    kind="tool_missing",
                    message=f"{self.executable}: missing",
                    hint="Install the .NET SDK: https://dot.net",
                )
            )

        cmd = [self.executable, *args]
        display = format_command(cmd, secrets)
        self.console.print(f"$ {display}", Style.DIM)

        result = run_streamed(cmd, cwd=self.cwd)
        if isinstance(result, Err):
            e = result.error
            return Err(
                StepError(
                    kind=kind,
                    message=f"{' '.join(cmd[:2])} failed (exit {e.returncode})",
                    hint=e.stderr.strip() or None,
                )
            )
        return Ok(None)
