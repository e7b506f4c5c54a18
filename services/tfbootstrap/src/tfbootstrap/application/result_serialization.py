"""JSON report printed by ``tfbootstrap install --json``."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from tfbootstrap.application.install_record import read_install_record, record_path
from tfbootstrap.domain.diagnostics import Diagnostic
from tfbootstrap.domain.json_types import JsonDict, as_json_dict
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import Settings

REPORT_VERSION = 1
RELEASE_FIELDS = ("version", "os", "arch", "url", "sha256", "installed_at")


def serialize_diagnostic(diag: Diagnostic) -> JsonDict:
    data: JsonDict = {
        "code": diag.code,
        "severity": diag.severity.value,
        "message": diag.message,
    }
    if diag.location is not None:
        data["location"] = {"kind": diag.location.kind, "at": diag.location.describe()}
    if diag.hint:
        data["hint"] = diag.hint
    if diag.details:
        data["details"] = as_json_dict(diag.details)
    return data


def release_details(binary: Path) -> JsonDict | None:
    """Release fields from the install record beside ``binary``, if one exists."""
    record = read_install_record(record_path(binary))
    if record.value is None:
        return None
    terraform = as_json_dict(record.value.get("terraform"))
    return {key: terraform[key] for key in RELEASE_FIELDS if key in terraform}


def serialize_install(result: Result[Path], settings: Settings) -> JsonDict:
    binary = result.value
    return {
        "report_version": REPORT_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": "install",
        "exit_code": result.exit_code,
        "requested_version": settings.terraform_version,
        "binary": str(binary) if binary is not None else None,
        # Only a fresh install reports an artifact; a reused binary does not.
        "installed": bool(result.artifacts),
        "release": release_details(binary) if binary is not None else None,
        "diagnostics": [serialize_diagnostic(d) for d in result.diagnostics],
    }
