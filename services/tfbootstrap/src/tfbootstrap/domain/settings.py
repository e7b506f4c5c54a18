from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re

from tfbootstrap.domain.diagnostics import Diagnostic, Severity, ValueLocation
from tfbootstrap.domain.release import DEFAULT_RELEASE_BASE_URL

# Release installed when no compatible binary is found.
DEFAULT_TERRAFORM_VERSION = "0.12.24"
DEFAULT_CHUNK_SIZE = 1024
INSTALL_RECORD_NAME = ".tfbootstrap.toml"

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?$")


def default_install_dir() -> Path:
    return Path.home() / ".tfbootstrap" / "bin"


@dataclass(frozen=True)
class Settings:
    terraform_version: str = DEFAULT_TERRAFORM_VERSION
    install_dir: Path | None = None
    release_base_url: str = DEFAULT_RELEASE_BASE_URL
    working_dir: Path | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    timeout_seconds: float | None = None
    extra_args: tuple[str, ...] = ()

    def target_install_dir(self) -> Path:
        return self.install_dir if self.install_dir is not None else default_install_dir()


def validate_settings(settings: Settings) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    if not _VERSION_RE.match(settings.terraform_version):
        diagnostics.append(
            Diagnostic(
                code="SETTINGS_VERSION_INVALID",
                rule="settings.terraform_version",
                severity=Severity.ERROR,
                message=f"Invalid terraform version: {settings.terraform_version!r}",
                location=ValueLocation("terraform_version", settings.terraform_version),
                hint="Use a release version such as 0.12.24.",
            )
        )
    if settings.chunk_size <= 0:
        diagnostics.append(
            Diagnostic(
                code="SETTINGS_CHUNK_SIZE_INVALID",
                rule="settings.chunk_size",
                severity=Severity.ERROR,
                message="chunk_size must be positive",
                location=ValueLocation("chunk_size", str(settings.chunk_size)),
            )
        )
    if settings.timeout_seconds is not None and settings.timeout_seconds <= 0:
        diagnostics.append(
            Diagnostic(
                code="SETTINGS_TIMEOUT_INVALID",
                rule="settings.timeout_seconds",
                severity=Severity.ERROR,
                message="timeout_seconds must be positive",
                location=ValueLocation("timeout_seconds", str(settings.timeout_seconds)),
            )
        )
    return diagnostics
