from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
import os
from pathlib import Path

from tfbootstrap.adapters.config.yaml_config import DEFAULT_CONFIG_NAME, YamlConfigSource
from tfbootstrap.adapters.errors import ConfigError, ConfigSchemaError
from tfbootstrap.domain.diagnostics import Diagnostic, FileLocation, Severity
from tfbootstrap.domain.json_types import JsonDict
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import Settings, validate_settings

ENV_PREFIX = "TFBOOTSTRAP_"


@dataclass(frozen=True)
class SettingsOverrides:
    terraform_version: str | None = None
    install_dir: Path | None = None
    working_dir: Path | None = None
    timeout_seconds: float | None = None
    extra_args: tuple[str, ...] = ()


def _from_file(settings: Settings, data: JsonDict, base: Path) -> Settings:
    changes: dict[str, object] = {}
    if isinstance(data.get("terraform_version"), str):
        changes["terraform_version"] = data["terraform_version"]
    if isinstance(data.get("release_base_url"), str):
        changes["release_base_url"] = data["release_base_url"]
    for key in ("install_dir", "working_dir"):
        raw = data.get(key)
        if isinstance(raw, str):
            changes[key] = base / Path(raw).expanduser()
    chunk_size = data.get("chunk_size")
    if isinstance(chunk_size, int) and not isinstance(chunk_size, bool):
        changes["chunk_size"] = chunk_size
    timeout = data.get("timeout_seconds")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        changes["timeout_seconds"] = float(timeout)
    extra = data.get("extra_args")
    if isinstance(extra, list):
        changes["extra_args"] = tuple(str(arg) for arg in extra)
    return replace(settings, **changes)


def _from_env(settings: Settings, env: Mapping[str, str]) -> Settings:
    changes: dict[str, object] = {}
    version = env.get(f"{ENV_PREFIX}TERRAFORM_VERSION")
    if version:
        changes["terraform_version"] = version
    install_dir = env.get(f"{ENV_PREFIX}INSTALL_DIR")
    if install_dir:
        changes["install_dir"] = Path(install_dir).expanduser()
    base_url = env.get(f"{ENV_PREFIX}RELEASE_BASE_URL")
    if base_url:
        changes["release_base_url"] = base_url
    return replace(settings, **changes)


def _from_overrides(settings: Settings, overrides: SettingsOverrides) -> Settings:
    changes: dict[str, object] = {}
    if overrides.terraform_version is not None:
        changes["terraform_version"] = overrides.terraform_version
    if overrides.install_dir is not None:
        changes["install_dir"] = overrides.install_dir
    if overrides.working_dir is not None:
        changes["working_dir"] = overrides.working_dir
    if overrides.timeout_seconds is not None:
        changes["timeout_seconds"] = overrides.timeout_seconds
    if overrides.extra_args:
        changes["extra_args"] = settings.extra_args + overrides.extra_args
    return replace(settings, **changes)


def _error_line(exc: ConfigError) -> int | None:
    line = (exc.details or {}).get("line")
    return line if isinstance(line, int) else None


def _config_diagnostic(path: Path, exc: ConfigError) -> Diagnostic:
    if isinstance(exc, ConfigSchemaError):
        return Diagnostic(
            code="CONFIG_SCHEMA_INVALID",
            rule="config.schema",
            severity=Severity.ERROR,
            message=exc.message,
            location=FileLocation(str(path)),
            details=exc.details,
        )
    return Diagnostic(
        code="CONFIG_PARSE_FAILED",
        rule="config.parse",
        severity=Severity.ERROR,
        message=str(exc),
        location=FileLocation(str(path), line=_error_line(exc)),
    )


def resolve_settings(
    config_path: Path | None = None,
    overrides: SettingsOverrides | None = None,
    env: Mapping[str, str] | None = None,
    source: YamlConfigSource | None = None,
) -> Result[Settings]:
    """Merge defaults, config file, environment and CLI overrides, in that order."""
    settings = Settings()
    path = config_path
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        path = candidate if candidate.is_file() else None
    if path is not None:
        config_source = source or YamlConfigSource()
        try:
            data = config_source.load(path)
        except ConfigError as e:
            return Result(diagnostics=[_config_diagnostic(path, e)])
        settings = _from_file(settings, data, path.resolve().parent)
    settings = _from_env(settings, os.environ if env is None else env)
    settings = _from_overrides(settings, overrides or SettingsOverrides())
    diagnostics = validate_settings(settings)
    if diagnostics:
        return Result(diagnostics=diagnostics)
    return Result(value=settings)
