from __future__ import annotations

from pathlib import Path

import pytest
import typer

from ship.ci.github_actions import CiEnvironment
from ship.cli.context import CLIContext
from ship.core.config import BuildConfig, Configuration
from ship.core.errors import ErrorCode
from ship.core.result import Err, Ok
from ship.core.workspace import Workspace
from ship.git.repository import GitInfo
from ship.output.console import MockConsole
from ship.pipeline.errors import StepError
from ship.pipeline.target import Target


def _ctx(tmp_path: Path) -> CLIContext:
    config = BuildConfig(
        root=tmp_path,
        configuration=Configuration.RELEASE,
        project=tmp_path,
        artifacts_dir=tmp_path / ".artifacts",
        changelog=tmp_path / "CHANGELOG.md",
    )
    return CLIContext(
        workspace=Workspace(root=tmp_path),
        config=config,
        ci=CiEnvironment(),
        git=GitInfo(branch="main", sha="abc"),
        console=MockConsole(),
    )


def _run(targets: list[str] | None = None, skip: list[str] | None = None) -> None:
    import ship.cli.commands.run_cmd as run_cmd

    run_cmd.run(
        targets=targets,
        skip=skip,
        configuration=None,
        project=None,
        artifacts_dir=None,
        changelog=None,
        myget_feed=None,
        myget_api_key=None,
        nuget_feed=None,
        nuget_api_key=None,
        github_token=None,
        copyright=None,
        artifacts_type=None,
        excluded_artifacts_type=None,
        gitversion_tool=None,
    )


def _patch(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, targets: list[Target]
) -> CLIContext:
    import ship.cli.commands.run_cmd as run_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(run_cmd, "build_context", lambda _params: ctx)
    monkeypatch.setattr(run_cmd, "define_targets", lambda _build_ctx: targets)
    return ctx


def _ok(ran: list[str], name: str):
    def action():
        ran.append(name)
        return Ok(None)

    return action


def test_run_default_target_succeeds(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    ran: list[str] = []
    ctx = _patch(
        monkeypatch,
        tmp_path,
        [
            Target(name="Compile", description="", action=_ok(ran, "Compile")),
            Target(
                name="Pack", description="", action=_ok(ran, "Pack"), depends_on=("Compile",)
            ),
        ],
    )

    _run()

    assert ran == ["Compile", "Pack"]
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.has_message("Build succeeded")


def test_run_unknown_target_is_user_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    ran: list[str] = []
    _patch(monkeypatch, tmp_path, [Target(name="Pack", description="", action=_ok(ran, "Pack"))])

    with pytest.raises(typer.Exit) as exc:
        _run(["Deploy"])

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert ran == []


def test_run_publish_failure_is_network_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def push():
        return Err(StepError(kind="publish_failed", message="dotnet nuget failed (exit 1)"))

    _patch(
        monkeypatch,
        tmp_path,
        [Target(name="Pack", description="", action=push)],
    )

    with pytest.raises(typer.Exit) as exc:
        _run()

    assert exc.value.exit_code == int(ErrorCode.NETWORK_ERROR)


def test_run_skip_leaves_target_out(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    ran: list[str] = []
    _patch(
        monkeypatch,
        tmp_path,
        [
            Target(name="Clean", description="", action=_ok(ran, "Clean")),
            Target(name="Pack", description="", action=_ok(ran, "Pack"), depends_on=("Clean",)),
        ],
    )

    _run(skip=["clean"])

    assert ran == ["Pack"]


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("tool_missing", ErrorCode.ENV_ERROR),
        ("invalid_input", ErrorCode.USER_ERROR),
        ("requirement_failed", ErrorCode.USER_ERROR),
        ("build_failed", ErrorCode.BUILD_ERROR),
        ("release_failed", ErrorCode.NETWORK_ERROR),
        ("io_failed", ErrorCode.IO_ERROR),
    ],
)
def test_step_error_code(kind, code: ErrorCode) -> None:
    from ship.cli.commands._helpers import step_error_code

    assert step_error_code(kind) is code
