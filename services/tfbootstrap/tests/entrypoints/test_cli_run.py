import os

import pytest
from typer.testing import CliRunner

from tfbootstrap.entrypoints.cli import app

pytestmark = pytest.mark.skipif(os.name != "posix", reason="needs a POSIX shell")


def _fake_terraform(directory, body):
    directory.mkdir(parents=True, exist_ok=True)
    calls = directory / "calls.log"
    binary = directory / "terraform"
    binary.write_text(f'#!/bin/sh\necho "$@" >> "{calls}"\n{body}\n')
    binary.chmod(0o755)
    return calls


def test_cli_run_applies_with_existing_binary(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls = _fake_terraform(tmp_path / "bin", 'echo "ran $1"')
    result = CliRunner().invoke(app, ["run", "--tf-path", str(tmp_path / "bin")])
    assert result.exit_code == 0
    assert "ran init" in result.stdout
    assert "ran apply" in result.stdout
    assert calls.read_text().splitlines() == [
        "init -input=false",
        "apply -input=false -auto-approve",
    ]


def test_cli_run_destroy_with_extra_args(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls = _fake_terraform(tmp_path / "bin", "exit 0")
    result = CliRunner().invoke(
        app,
        ["run", "--destroy", "--tf-path", str(tmp_path / "bin"), "--extra-arg", "-lock=false"],
    )
    assert result.exit_code == 0
    assert calls.read_text().splitlines()[1] == "destroy -input=false -auto-approve -lock=false"


def test_cli_run_init_failure_is_fatal_and_skips_apply(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls = _fake_terraform(
        tmp_path / "bin",
        'if [ "$1" = init ]; then echo "backend unreachable" 1>&2; exit 1; fi',
    )
    result = CliRunner().invoke(app, ["run", "--tf-path", str(tmp_path / "bin")])
    assert result.exit_code == 3
    assert calls.read_text().splitlines() == ["init -input=false"]


def test_cli_run_invalid_config_exits_2(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tfbootstrap.yaml").write_text("unknown_key: 1\n")
    result = CliRunner().invoke(app, ["run"])
    assert result.exit_code == 2
