from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from ship.build import BuildContext
from ship.ci.github_actions import CiEnvironment, detect_ci
from ship.core.config import BuildConfig, BuildParameters, load_parameters, resolve_config
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.core.workspace import Workspace, detect_workspace
from ship.git.repository import GitInfo, Repository
from ship.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    config: BuildConfig
    ci: CiEnvironment
    git: GitInfo
    console: ConsoleProtocol

    def build_context(self) -> BuildContext:
        return BuildContext(config=self.config, git=self.git, ci=self.ci, console=self.console)


def _fail(console: ConsoleProtocol, message: str, hint: str | None, code: ErrorCode) -> NoReturn:
    console.error(message)
    if hint:
        console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def build_context(params: BuildParameters, *, start_dir: Path | None = None) -> CLIContext:
    console = RichConsole()

    workspace_result = detect_workspace(start_dir=start_dir)
    if isinstance(workspace_result, Err):
        _fail(console, workspace_result.error.message, None, ErrorCode.ENV_ERROR)
    workspace = workspace_result.value

    file_params = load_parameters(workspace.config_path)
    if isinstance(file_params, Err):
        e = file_params.error
        _fail(console, e.message, e.hint, ErrorCode.USER_ERROR)

    ci = detect_ci()
    config = resolve_config(
        root=workspace.root,
        cli=params,
        file=file_params.value,
        is_server_build=ci.is_ci,
    )
    if isinstance(config, Err):
        e = config.error
        _fail(console, e.message, e.hint, ErrorCode.USER_ERROR)

    git = Repository(workspace.root).info(ci)
    if isinstance(git, Err):
        _fail(console, f"git: {git.error.message}", None, ErrorCode.ENV_ERROR)

    return CLIContext(
        workspace=workspace,
        config=config.value,
        ci=ci,
        git=git.value,
        console=console,
    )
