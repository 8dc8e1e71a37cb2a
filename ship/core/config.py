"""Typed build parameters.

Parameters come from three layers, highest precedence first:

1. CLI options (which typer also fills from environment variables)
2. the `[parameters]` table of `ship.toml`
3. defaults (configuration is Debug locally and Release on a CI server)

Secrets (API keys, the GitHub token) are only taken from layer 1; a secret
found in `ship.toml` is rejected rather than silently used.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "BuildConfig",
    "BuildParameters",
    "ConfigError",
    "Configuration",
    "SECRET_PARAMETERS",
    "load_parameters",
    "resolve_config",
]

DEFAULT_ARTIFACTS_TYPE = "*.nupkg"
DEFAULT_EXCLUDED_ARTIFACTS_TYPE = ".symbols.nupkg"
DEFAULT_NUGET_FEED = "https://api.nuget.org/v3/index.json"

SECRET_PARAMETERS = frozenset({"myget_api_key", "nuget_api_key", "github_token"})


class Configuration(StrEnum):
    DEBUG = "Debug"
    RELEASE = "Release"

    @classmethod
    def parse(cls, value: str) -> Configuration | None:
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        return None


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when parameters cannot be loaded or are invalid."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class BuildParameters:
    """Raw, optional parameter values for one layer (CLI or file)."""

    configuration: str | None = None
    project: str | None = None
    artifacts_dir: str | None = None
    changelog: str | None = None
    myget_feed: str | None = None
    myget_api_key: str | None = None
    nuget_feed: str | None = None
    nuget_api_key: str | None = None
    github_token: str | None = None
    copyright: str | None = None
    artifacts_type: str | None = None
    excluded_artifacts_type: str | None = None
    gitversion_tool: str | None = None

    def overlay(self, other: BuildParameters) -> BuildParameters:
        """Return self with every non-None value of `other` applied on top."""
        changes = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Resolved, immutable configuration for one pipeline invocation."""

    root: Path
    configuration: Configuration
    project: Path
    artifacts_dir: Path
    changelog: Path
    myget_feed: str | None = None
    myget_api_key: str | None = field(default=None, repr=False)
    nuget_feed: str = DEFAULT_NUGET_FEED
    nuget_api_key: str | None = field(default=None, repr=False)
    github_token: str | None = field(default=None, repr=False)
    copyright: str | None = None
    artifacts_type: str = DEFAULT_ARTIFACTS_TYPE
    excluded_artifacts_type: str = DEFAULT_EXCLUDED_ARTIFACTS_TYPE
    gitversion_tool: str = "dotnet-gitversion"

    @property
    def is_release(self) -> bool:
        return self.configuration is Configuration.RELEASE


def _parameters_from_table(table: Mapping[str, object]) -> BuildParameters:
    values: dict[str, str | None] = {}
    for f in fields(BuildParameters):
        # TOML keys use dashes, dataclass fields use underscores
        values[f.name] = get_str(table, f.name.replace("_", "-")) or get_str(table, f.name)
    return BuildParameters(**values)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_parameters(path: Path) -> Result[BuildParameters, ConfigError]:
    """Load the `[parameters]` table of a `ship.toml` file.

    A missing file yields empty parameters.
    """
    if not path.exists():
        return Ok(BuildParameters())

    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    table = get_table(parsed.value, "parameters") or {}
    params = _parameters_from_table(table)

    leaked = sorted(
        name for name in SECRET_PARAMETERS if getattr(params, name) is not None
    )
    if leaked:
        return Err(
            ConfigError(
                f"Secrets must not be stored in {path.name}: {', '.join(leaked)}",
                path=path,
                hint="Pass them as environment variables or CLI options",
            )
        )
    return Ok(params)


def resolve_config(
    *,
    root: Path,
    cli: BuildParameters,
    file: BuildParameters,
    is_server_build: bool,
) -> Result[BuildConfig, ConfigError]:
    """Merge parameter layers into a BuildConfig."""
    merged = file.overlay(cli)

    if merged.configuration is None:
        configuration = Configuration.RELEASE if is_server_build else Configuration.DEBUG
    else:
        parsed = Configuration.parse(merged.configuration)
        if parsed is None:
            return Err(
                ConfigError(
                    f"Unknown configuration: {merged.configuration}",
                    hint="Use Debug or Release",
                )
            )
        configuration = parsed

    def _path(value: str | None, default: Path) -> Path:
        if value is None:
            return default
        p = Path(value).expanduser()
        return p if p.is_absolute() else root / p

    project = _path(merged.project, root)

    return Ok(
        BuildConfig(
            root=root,
            configuration=configuration,
            project=project,
            artifacts_dir=_path(merged.artifacts_dir, root / ".artifacts"),
            changelog=_path(merged.changelog, root / "CHANGELOG.md"),
            myget_feed=merged.myget_feed,
            myget_api_key=merged.myget_api_key,
            nuget_feed=merged.nuget_feed or DEFAULT_NUGET_FEED,
            nuget_api_key=merged.nuget_api_key,
            github_token=merged.github_token,
            copyright=merged.copyright,
            artifacts_type=merged.artifacts_type or DEFAULT_ARTIFACTS_TYPE,
            excluded_artifacts_type=merged.excluded_artifacts_type
            or DEFAULT_EXCLUDED_ARTIFACTS_TYPE,
            gitversion_tool=merged.gitversion_tool or "dotnet-gitversion",
        )
    )
