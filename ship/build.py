"""The release pipeline for the package.

    Info -> Clean -> Restore -> Compile -> Pack
                                            |-> PublishToGithub  (develop branch or pull request)
                                            |-> PublishToMyGet   (release branch)
                                            |-> PublishToNuGet   (main/master)
                                                    |-> CreateRelease (main/master or release branch)

Pack, every publish target and CreateRelease require the Release
configuration (the default on a CI server).
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ship.ci.github_actions import CiEnvironment
from ship.core.config import BuildConfig
from ship.core.result import Err, Ok, Result
from ship.git.repository import GitInfo
from ship.output.console import ConsoleProtocol, Style
from ship.pipeline.errors import StepError
from ship.pipeline.target import Condition, Target
from ship.services.artifacts import ensure_clean_directory, glob_artifacts
from ship.services.dotnet import DotNet, VersionStamps
from ship.services.gh import GhSession, ensure_gh_available
from ship.services.nuget_publish import PackageFeed, publish_artifacts
from ship.services.release import create_github_release
from ship.services.versioning import VersionInfo, resolve_version

DEFAULT_TARGET = "Pack"

VersionResolver = Callable[[], Result[VersionInfo, StepError]]


def _mask(value: str | None) -> str:
    return "****" if value else "-"


class BuildContext:
    """Everything the targets read: config, git and CI facts, tools."""

    def __init__(
        self,
        *,
        config: BuildConfig,
        git: GitInfo,
        ci: CiEnvironment,
        console: ConsoleProtocol,
        dotnet: DotNet | None = None,
        version_resolver: VersionResolver | None = None,
    ) -> None:
        self.config = config
        self.git = git
        self.ci = ci
        self.console = console
        self.dotnet = dotnet or DotNet(cwd=config.root, console=console)
        self._version_resolver = version_resolver or (
            lambda: resolve_version(root=config.root, tool=config.gitversion_tool)
        )
        self._version: Result[VersionInfo, StepError] | None = None

    def version(self) -> Result[VersionInfo, StepError]:
        """GitVersion output, computed on first use and reused afterwards."""
        if self._version is None:
            self._version = self._version_resolver()
        return self._version

    @property
    def github_token(self) -> str | None:
        return self.config.github_token or self.ci.token

    @property
    def github_feed(self) -> str | None:
        return self.ci.package_feed if self.ci.is_ci else None

    def artifacts(self) -> list[Path]:
        return glob_artifacts(
            self.config.artifacts_dir,
            self.config.artifacts_type,
            self.config.excluded_artifacts_type,
        )


def _stamps(ctx: BuildContext) -> Result[VersionStamps, StepError]:
    version = ctx.version()
    if isinstance(version, Err):
        return version
    return Ok(VersionStamps.from_version(version.value))


def info(ctx: BuildContext) -> Result[None, StepError]:
    cfg = ctx.config
    rows = [
        ("Configuration", str(cfg.configuration)),
        ("Is PullRequest", str(ctx.ci.is_pull_request)),
        ("Is Development", str(ctx.git.is_on_develop_branch)),
        ("Is Master", str(ctx.git.is_on_main_or_master_branch)),
        ("Is Release Branch", str(ctx.git.is_on_release_branch)),
        ("GitHub Source Pkg", ctx.github_feed or "-"),
        ("GitHub Token", _mask(ctx.github_token)),
        ("MyGet Feed", cfg.myget_feed or "-"),
        ("MyGet Api Key", _mask(cfg.myget_api_key)),
        ("NuGet Feed", cfg.nuget_feed),
        ("NuGet Api Key", _mask(cfg.nuget_api_key)),
        ("Root Dir", str(cfg.root)),
        ("Artifacts Dir", str(cfg.artifacts_dir)),
        ("ArtifactsType", cfg.artifacts_type),
        ("ExcludedArtifactsType", cfg.excluded_artifacts_type),
        ("Repository", ctx.git.slug or "-"),
        ("Branch", ctx.git.branch or "(detached)"),
        ("Commit", ctx.git.sha),
    ]
    width = max(len(k) for k, _ in rows)
    for key, value in rows:
        ctx.console.print(f"{key:<{width}} : {value}")
    return Ok(None)


def clean(ctx: BuildContext) -> Result[None, StepError]:
    result = ctx.dotnet.clean(ctx.config.project)
    if isinstance(result, Err):
        return result
    return ensure_clean_directory(ctx.config.artifacts_dir)


def restore(ctx: BuildContext) -> Result[None, StepError]:
    return ctx.dotnet.restore(ctx.config.project)


def compile_(ctx: BuildContext) -> Result[None, StepError]:
    stamps = _stamps(ctx)
    if isinstance(stamps, Err):
        return stamps
    ctx.console.print(f"Version {stamps.value.version}", Style.DIM)
    return ctx.dotnet.build(
        ctx.config.project,
        configuration=str(ctx.config.configuration),
        stamps=stamps.value,
    )


def pack(ctx: BuildContext) -> Result[None, StepError]:
    stamps = _stamps(ctx)
    if isinstance(stamps, Err):
        return stamps
    result = ctx.dotnet.pack(
        ctx.config.project,
        configuration=str(ctx.config.configuration),
        output=ctx.config.artifacts_dir,
        stamps=stamps.value,
        copyright=ctx.config.copyright,
    )
    if isinstance(result, Err):
        return result

    produced = ctx.artifacts()
    if not produced:
        return Err(
            StepError(
                kind="build_failed",
                message=f"pack produced no {ctx.config.artifacts_type} in {ctx.config.artifacts_dir}",
            )
        )
    for path in produced:
        ctx.console.print(f"  {path.name}", Style.DIM)
    return Ok(None)


def _publish(ctx: BuildContext, feed: PackageFeed) -> Result[None, StepError]:
    result = publish_artifacts(
        dotnet=ctx.dotnet,
        feed=feed,
        artifacts_dir=ctx.config.artifacts_dir,
        include=ctx.config.artifacts_type,
        exclude=ctx.config.excluded_artifacts_type,
        console=ctx.console,
    )
    if isinstance(result, Err):
        return result
    return Ok(None)


def publish_to_github(ctx: BuildContext) -> Result[None, StepError]:
    return _publish(ctx, PackageFeed("GitHub Packages", ctx.github_feed, ctx.github_token))


def publish_to_myget(ctx: BuildContext) -> Result[None, StepError]:
    cfg = ctx.config
    return _publish(ctx, PackageFeed("MyGet", cfg.myget_feed, cfg.myget_api_key))


def publish_to_nuget(ctx: BuildContext) -> Result[None, StepError]:
    cfg = ctx.config
    return _publish(ctx, PackageFeed("NuGet", cfg.nuget_feed, cfg.nuget_api_key))


def create_release(ctx: BuildContext) -> Result[None, StepError]:
    available = ensure_gh_available()
    if isinstance(available, Err):
        return available

    repo = ctx.git.slug
    if repo is None:
        return Err(
            StepError(
                kind="invalid_input",
                message="cannot determine the GitHub repository",
                hint="Set GITHUB_REPOSITORY or add a github.com 'origin' remote",
            )
        )

    version = ctx.version()
    if isinstance(version, Err):
        return version

    session = GhSession(workspace_root=ctx.config.root, repo=repo, token=ctx.github_token)
    result = create_github_release(
        session=session,
        version=version.value,
        changelog=ctx.config.changelog,
        assets=ctx.artifacts(),
        console=ctx.console,
    )
    if isinstance(result, Err):
        return result
    return Ok(None)


def define_targets(ctx: BuildContext) -> list[Target]:
    """The fixed target graph, in declaration order."""
    is_release = Condition("Configuration == Release", lambda: ctx.config.is_release)
    develop_or_pr = Condition(
        "on develop branch or pull request",
        lambda: ctx.git.is_on_develop_branch or ctx.ci.is_pull_request,
    )
    release_branch = Condition("on release branch", lambda: ctx.git.is_on_release_branch)
    main_or_master = Condition("on main/master branch", lambda: ctx.git.is_on_main_or_master_branch)
    releasable = Condition(
        "on main/master or release branch",
        lambda: ctx.git.is_on_main_or_master_branch or ctx.git.is_on_release_branch,
    )
    publishes = ("PublishToGithub", "PublishToMyGet", "PublishToNuGet")

    return [
        Target(
            name="Info",
            description="Prints the build configuration.",
            action=lambda: info(ctx),
        ),
        Target(
            name="Clean",
            description="Cleans the project and the artifacts directory.",
            action=lambda: clean(ctx),
            depends_on=("Info",),
            before=("Restore",),
        ),
        Target(
            name="Restore",
            description="Restores project dependencies.",
            action=lambda: restore(ctx),
            depends_on=("Clean",),
        ),
        Target(
            name="Compile",
            description="Builds the project with the GitVersion version.",
            action=lambda: compile_(ctx),
            depends_on=("Restore",),
        ),
        Target(
            name="Pack",
            description="Packs the project into the artifacts directory.",
            action=lambda: pack(ctx),
            depends_on=("Compile",),
            triggers=publishes,
            requires=(is_release,),
        ),
        Target(
            name="PublishToGithub",
            description="Publishes to GitHub Packages (development only).",
            action=lambda: publish_to_github(ctx),
            triggers=("CreateRelease",),
            requires=(is_release,),
            only_when=(develop_or_pr,),
        ),
        Target(
            name="PublishToMyGet",
            description="Publishes to MyGet (pre-releases only).",
            action=lambda: publish_to_myget(ctx),
            triggers=("CreateRelease",),
            requires=(is_release,),
            only_when=(release_branch,),
        ),
        Target(
            name="PublishToNuGet",
            description="Publishes to NuGet.",
            action=lambda: publish_to_nuget(ctx),
            triggers=("CreateRelease",),
            requires=(is_release,),
            only_when=(main_or_master,),
        ),
        Target(
            name="CreateRelease",
            description="Creates the GitHub release for the published version.",
            action=lambda: create_release(ctx),
            requires=(is_release,),
            only_when=(releasable,),
        ),
    ]
