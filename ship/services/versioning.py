"""Version stamps from GitVersion.

GitVersion is run once per pipeline invocation with JSON output; the fields
the build stamps into assemblies and packages are copied into VersionInfo.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.core.structured import as_str_dict, get_raw_str, get_str
from ship.pipeline.errors import StepError
from ship.platform.process import run as run_process
from ship.services.timeouts import GITVERSION_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class VersionInfo:
    nuget_version_v2: str
    assembly_sem_ver: str
    assembly_sem_file_ver: str
    informational_version: str
    sha: str
    branch_name: str
    pre_release_tag: str = ""

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre_release_tag)


_REQUIRED = {
    "nuget_version_v2": "NuGetVersionV2",
    "assembly_sem_ver": "AssemblySemVer",
    "assembly_sem_file_ver": "AssemblySemFileVer",
    "informational_version": "InformationalVersion",
    "sha": "Sha",
    "branch_name": "BranchName",
}


def parse_gitversion_json(text: str) -> Result[VersionInfo, StepError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(StepError(kind="invalid_input", message=f"GitVersion returned invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(StepError(kind="invalid_input", message="unexpected GitVersion payload"))

    values: dict[str, str] = {}
    missing: list[str] = []
    for attr, key in _REQUIRED.items():
        value = get_str(data, key)
        if value is None:
            missing.append(key)
        else:
            values[attr] = value
    if missing:
        return Err(
            StepError(
                kind="invalid_input",
                message=f"GitVersion output is missing: {', '.join(missing)}",
            )
        )

    # PreReleaseTag is present but empty for stable versions
    pre = get_raw_str(data, "PreReleaseTag") or ""
    return Ok(VersionInfo(pre_release_tag=pre.strip(), **values))


def resolve_version(*, root: Path, tool: str) -> Result[VersionInfo, StepError]:
    """Run GitVersion in `root` and parse its JSON output."""
    if shutil.which(tool) is None:
        return Err(
            StepError(
                kind="tool_missing",
                message=f"{tool}: missing",
                hint="Install it with: dotnet tool install --global GitVersion.Tool",
            )
        )

    result = run_process(
        [tool, str(root), "/output", "json"],
        cwd=root,
        timeout=GITVERSION_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        e = result.error
        return Err(
            StepError(
                kind="invalid_input",
                message="GitVersion failed",
                hint=(e.stderr.strip() or e.stdout.strip()) or None,
            )
        )
    return parse_gitversion_json(result.value)
