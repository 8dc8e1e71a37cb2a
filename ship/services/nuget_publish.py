"""Push packed artifacts to a NuGet feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol
from ship.pipeline.errors import StepError
from ship.services.artifacts import glob_artifacts
from ship.services.dotnet import DotNet


@dataclass(frozen=True, slots=True)
class PackageFeed:
    """A push destination.

    Attributes:
        label: Human name for output ("GitHub Packages", "MyGet", "NuGet")
        url: Feed push URL (None if not configured)
        api_key: Key sent with every push (None if not configured)
    """

    label: str
    url: str | None
    api_key: str | None = field(default=None, repr=False)


def publish_artifacts(
    *,
    dotnet: DotNet,
    feed: PackageFeed,
    artifacts_dir: Path,
    include: str,
    exclude: str | None,
    console: ConsoleProtocol,
) -> Result[list[Path], StepError]:
    """Push every matching artifact to `feed`; returns the pushed files.

    Packages the feed already holds are skipped by the server, not failed.
    """
    if not feed.url:
        return Err(
            StepError(
                kind="invalid_input",
                message=f"{feed.label} feed URL is not configured",
            )
        )
    if not feed.api_key:
        return Err(
            StepError(
                kind="invalid_input",
                message=f"{feed.label} API key is not configured",
            )
        )

    packages = glob_artifacts(artifacts_dir, include, exclude)
    console.info(
        f"Publishing from {artifacts_dir} types {include} excluding {exclude or '-'} "
        f"to {feed.label}"
    )
    if not packages:
        console.warning(f"no artifacts matching {include} in {artifacts_dir}")
        return Ok([])

    pushed: list[Path] = []
    for package in packages:
        console.print(f"Package {package.name} to {feed.url}")
        result = dotnet.nuget_push(package, source=feed.url, api_key=feed.api_key)
        if isinstance(result, Err):
            return result
        pushed.append(package)

    console.success(f"{len(pushed)} package(s) pushed to {feed.label}")
    return Ok(pushed)
