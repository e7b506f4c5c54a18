from tfbootstrap.application.install_record import record_path, write_install_record
from tfbootstrap.application.result_serialization import (
    serialize_diagnostic,
    serialize_install,
)
from tfbootstrap.domain.diagnostics import Diagnostic, FileLocation, Severity, ValueLocation
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import Settings


def _installed_binary(tmp_path):
    binary = tmp_path / "terraform"
    binary.write_text("#!/bin/sh\n")
    write_install_record(
        record_path(binary),
        {
            "terraform": {
                "version": "0.12.24",
                "os": "linux",
                "arch": "amd64",
                "url": "https://releases.hashicorp.com/terraform/0.12.24/terraform_0.12.24_linux_amd64.zip",
                "sha256": "ab" * 32,
                "installed_at": "2024-01-01T00:00:00+00:00",
            }
        },
    )
    return binary


def test_fresh_install_reports_release_from_record(tmp_path):
    binary = _installed_binary(tmp_path)
    result = Result(value=binary, artifacts=[{"kind": "terraform_binary", "path": str(binary)}])
    data = serialize_install(result, Settings())
    assert data["exit_code"] == 0
    assert data["binary"] == str(binary)
    assert data["installed"] is True
    assert data["release"]["os"] == "linux"
    assert data["release"]["arch"] == "amd64"
    assert data["release"]["sha256"] == "ab" * 32
    assert data["release"]["url"].endswith("terraform_0.12.24_linux_amd64.zip")
    assert data["diagnostics"] == []


def test_reused_binary_without_record_has_no_release(tmp_path):
    binary = tmp_path / "terraform"
    binary.write_text("#!/bin/sh\n")
    data = serialize_install(Result(value=binary), Settings(terraform_version="1.5.7"))
    assert data["installed"] is False
    assert data["release"] is None
    assert data["requested_version"] == "1.5.7"


def test_failed_install_reports_diagnostics():
    result = Result(
        diagnostics=[
            Diagnostic(
                code="TERRAFORM_INSTALL_FAILED",
                rule="provision.install",
                severity=Severity.ERROR,
                message="Unable to install terraform",
                location=ValueLocation("terraform_version", "0.12.24"),
                details={"url": "http://mirror.test/x.zip"},
                is_execution=True,
            )
        ]
    )
    data = serialize_install(result, Settings())
    assert data["exit_code"] == 3
    assert data["binary"] is None
    assert data["release"] is None
    diag = data["diagnostics"][0]
    assert diag["severity"] == "error"
    assert diag["location"] == {"kind": "value", "at": "terraform_version='0.12.24'"}
    assert diag["details"] == {"url": "http://mirror.test/x.zip"}


def test_diagnostic_omits_empty_fields():
    diag = Diagnostic(
        code="CONFIG_PARSE_FAILED",
        rule="config.parse",
        severity=Severity.ERROR,
        message="Config file is not valid YAML",
        location=FileLocation("tfbootstrap.yaml", line=3),
    )
    assert serialize_diagnostic(diag) == {
        "code": "CONFIG_PARSE_FAILED",
        "severity": "error",
        "message": "Config file is not valid YAML",
        "location": {"kind": "file", "at": "tfbootstrap.yaml:3"},
    }
