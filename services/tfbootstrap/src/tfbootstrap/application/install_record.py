from __future__ import annotations

from datetime import datetime, timezone
import hashlib
from pathlib import Path
import tomllib

import tomli_w

from tfbootstrap.domain.diagnostics import Diagnostic, FileLocation, Severity
from tfbootstrap.domain.json_types import JsonDict, as_json_dict
from tfbootstrap.domain.release import TerraformRelease
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import INSTALL_RECORD_NAME

RecordDict = JsonDict


def record_path(binary: Path) -> Path:
    return binary.parent / INSTALL_RECORD_NAME


def read_install_record(path: Path) -> Result[RecordDict]:
    if not path.exists():
        return Result(
            diagnostics=[
                Diagnostic(
                    code="INSTALL_RECORD_MISSING",
                    rule="install_record.exists",
                    severity=Severity.ERROR,
                    message=f"{INSTALL_RECORD_NAME} not found",
                    location=FileLocation(str(path)),
                )
            ]
        )
    try:
        raw = as_json_dict(tomllib.loads(path.read_text(encoding="utf-8")))
    except (OSError, tomllib.TOMLDecodeError) as e:
        return Result(
            diagnostics=[
                Diagnostic(
                    code="INSTALL_RECORD_PARSE_FAILED",
                    rule="install_record.parse",
                    severity=Severity.ERROR,
                    message=str(e),
                    location=FileLocation(str(path)),
                )
            ]
        )
    return Result(value=raw)


def write_install_record(path: Path, record: RecordDict) -> None:
    path.write_text(tomli_w.dumps(dict(record)), encoding="utf-8")


def recorded_version(record: RecordDict) -> str | None:
    terraform = as_json_dict(record.get("terraform"))
    version = terraform.get("version")
    return str(version) if version is not None else None


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(64 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def build_record(release: TerraformRelease, archive: Path) -> RecordDict:
    return as_json_dict(
        {
            "terraform": {
                "version": release.version,
                "os": release.platform.os,
                "arch": release.platform.arch,
                "url": release.url,
                "sha256": file_sha256(archive),
                "installed_at": datetime.now(timezone.utc).isoformat(),
            }
        }
    )
