"""Run command - execute pipeline targets."""

from __future__ import annotations

import typer

from ship.build import DEFAULT_TARGET, define_targets
from ship.cli.commands._helpers import exit_with_code, step_error_code
from ship.cli.context import build_context
from ship.core.config import BuildParameters
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.output.console import Style
from ship.pipeline.driver import print_summary, run_plan
from ship.pipeline.plan import build_plan


def run(
    targets: list[str] | None = typer.Argument(
        None, help=f"Targets to run (default: {DEFAULT_TARGET})", show_default=False
    ),
    skip: list[str] | None = typer.Option(
        None, "--skip", help="Target to leave out (repeatable)", show_default=False
    ),
    configuration: str | None = typer.Option(
        None,
        "--configuration",
        "-c",
        envvar="CONFIGURATION",
        help="Debug or Release (default: Debug locally, Release on CI)",
        show_default=False,
    ),
    project: str | None = typer.Option(
        None, "--project", envvar="PROJECT", help="Project or solution to build"
    ),
    artifacts_dir: str | None = typer.Option(
        None, "--artifacts-dir", envvar="ARTIFACTS_DIR", help="Output directory for packages"
    ),
    changelog: str | None = typer.Option(
        None, "--changelog", envvar="CHANGELOG", help="Changelog used for release notes"
    ),
    myget_feed: str | None = typer.Option(
        None, "--myget-feed", envvar="MYGET_FEED", help="MyGet feed for pre-releases"
    ),
    myget_api_key: str | None = typer.Option(
        None, "--myget-api-key", envvar="MYGET_API_KEY", help="MyGet API key", show_envvar=True
    ),
    nuget_feed: str | None = typer.Option(
        None, "--nuget-feed", envvar="NUGET_FEED", help="NuGet feed for releases"
    ),
    nuget_api_key: str | None = typer.Option(
        None, "--nuget-api-key", envvar="NUGET_API_KEY", help="NuGet API key", show_envvar=True
    ),
    github_token: str | None = typer.Option(
        None, "--github-token", envvar="GITHUB_TOKEN", help="GitHub token", show_envvar=True
    ),
    copyright: str | None = typer.Option(
        None, "--copyright", envvar="COPYRIGHT", help="Copyright stamped into the package"
    ),
    artifacts_type: str | None = typer.Option(
        None, "--artifacts-type", envvar="ARTIFACTS_TYPE", help="Artifact glob (e.g. *.nupkg)"
    ),
    excluded_artifacts_type: str | None = typer.Option(
        None,
        "--excluded-artifacts-type",
        envvar="EXCLUDED_ARTIFACTS_TYPE",
        help="Artifact suffix or glob to leave out (e.g. .symbols.nupkg)",
    ),
    gitversion_tool: str | None = typer.Option(
        None, "--gitversion-tool", envvar="GITVERSION_TOOL", help="GitVersion executable"
    ),
) -> None:
    """Run pipeline targets and their dependencies."""
    params = BuildParameters(
        configuration=configuration,
        project=project,
        artifacts_dir=artifacts_dir,
        changelog=changelog,
        myget_feed=myget_feed,
        myget_api_key=myget_api_key,
        nuget_feed=nuget_feed,
        nuget_api_key=nuget_api_key,
        github_token=github_token,
        copyright=copyright,
        artifacts_type=artifacts_type,
        excluded_artifacts_type=excluded_artifacts_type,
        gitversion_tool=gitversion_tool,
    )
    ctx = build_context(params)

    plan = build_plan(
        define_targets(ctx.build_context()),
        targets or [DEFAULT_TARGET],
        skip=skip or [],
    )
    if isinstance(plan, Err):
        ctx.console.error(plan.error.message)
        if plan.error.hint:
            ctx.console.print(f"targets: {plan.error.hint}", Style.DIM)
        exit_with_code(int(ErrorCode.USER_ERROR))

    report = run_plan(plan.value, console=ctx.console)
    print_summary(report, console=ctx.console)

    failed = report.failed
    if failed is None:
        return
    code = step_error_code(failed.error.kind) if failed.error else ErrorCode.BUILD_ERROR
    exit_with_code(int(code))
