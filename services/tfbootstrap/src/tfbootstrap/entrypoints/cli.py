from pathlib import Path
import json
import logging
from typing import TypeVar

import typer

from tfbootstrap.adapters.process.subprocess_runner import SubprocessCommandRunner
from tfbootstrap.application.configure import SettingsOverrides, resolve_settings
from tfbootstrap.application.drive import run_terraform
from tfbootstrap.application.provision import ensure_terraform
from tfbootstrap.application.result_serialization import serialize_install
from tfbootstrap.domain.result import Result
from tfbootstrap.domain.settings import Settings
from tfbootstrap.entrypoints.logging_config import setup_logging

app = typer.Typer(add_completion=False, help="Install terraform if needed, then init and apply.")
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _report_errors(result: Result[T], headline: str | None = None) -> None:
    for diag in result.errors:
        if headline:
            logger.critical("%s: %s", headline, diag.render())
        else:
            logger.critical(diag.render())
        if diag.hint:
            logger.critical("hint: %s", diag.hint)


def _load_settings(config: Path | None, overrides: SettingsOverrides) -> Settings:
    resolved = resolve_settings(config, overrides)
    if resolved.value is None:
        _report_errors(resolved, "Invalid configuration")
        raise typer.Exit(resolved.exit_code)
    return resolved.value


@app.command()
def run(
    destroy: bool = typer.Option(False, "--destroy", help="Destroy instead of apply."),
    tf_path: Path | None = typer.Option(None, "--tf-path", help="Directory holding the terraform binary."),
    config: Path | None = typer.Option(None, "--config"),
    terraform_version: str | None = typer.Option(None, "--terraform-version"),
    chdir: Path | None = typer.Option(None, "--chdir", help="Directory to run terraform in."),
    timeout: float | None = typer.Option(None, "--timeout", help="Kill terraform after this many seconds."),
    extra_arg: list[str] = typer.Option(None, "--extra-arg"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    setup_logging(verbose)
    settings = _load_settings(
        config,
        SettingsOverrides(
            terraform_version=terraform_version,
            install_dir=tf_path,
            working_dir=chdir,
            timeout_seconds=timeout,
            extra_args=tuple(extra_arg or []),
        ),
    )
    provisioned = ensure_terraform(settings)
    if provisioned.value is None:
        _report_errors(provisioned)
        raise typer.Exit(provisioned.exit_code)

    runner = SubprocessCommandRunner(
        chunk_size=settings.chunk_size, timeout_seconds=settings.timeout_seconds
    )
    result = run_terraform(
        provisioned.value,
        destroy=destroy,
        runner=runner,
        cwd=settings.working_dir,
        extra_args=settings.extra_args,
    )
    _report_errors(result)
    raise typer.Exit(result.exit_code)


@app.command()
def install(
    tf_path: Path | None = typer.Option(None, "--tf-path", help="Directory to install terraform into."),
    config: Path | None = typer.Option(None, "--config"),
    terraform_version: str | None = typer.Option(None, "--terraform-version"),
    json_output: bool = typer.Option(False, "--json"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    setup_logging(verbose)
    settings = _load_settings(
        config,
        SettingsOverrides(terraform_version=terraform_version, install_dir=tf_path),
    )
    result = ensure_terraform(settings)
    if json_output:
        typer.echo(json.dumps(serialize_install(result, settings)))
    elif result.value is not None:
        typer.echo(str(result.value))
    _report_errors(result)
    raise typer.Exit(result.exit_code)
