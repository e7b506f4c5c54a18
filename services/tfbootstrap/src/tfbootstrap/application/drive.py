from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from pathlib import Path

from tfbootstrap.domain.diagnostics import Diagnostic, Severity
from tfbootstrap.domain.result import Result
from tfbootstrap.ports.command_runner import (
    CommandInvocation,
    CommandResult,
    CommandRunnerPort,
)

logger = logging.getLogger(__name__)

INIT_ARGS = ("init", "-input=false")
CHANGE_ARGS = ("-input=false", "-auto-approve")


@dataclass(frozen=True)
class Step:
    name: str
    invocation: CommandInvocation


def plan_steps(
    binary: Path | str,
    *,
    destroy: bool,
    cwd: Path | None = None,
    extra_args: Sequence[str] = (),
) -> list[Step]:
    executable = str(binary)
    action = "destroy" if destroy else "apply"
    return [
        Step("init", CommandInvocation(executable, INIT_ARGS, cwd)),
        Step(
            action,
            CommandInvocation(executable, (action, *CHANGE_ARGS, *extra_args), cwd),
        ),
    ]


def _step_failed(step: Step, outcome: CommandResult) -> Diagnostic:
    failure = outcome.failure
    kind = failure.kind.value if failure is not None else None
    reason = failure.message if failure is not None else "unknown failure"
    return Diagnostic(
        code=f"TERRAFORM_{step.name.upper()}_FAILED",
        rule=f"terraform.{step.name}",
        severity=Severity.ERROR,
        message=f"Failed to terraform {step.name}: {reason}",
        details={"step": step.name, "kind": kind, "exit_code": outcome.exit_code},
        is_execution=True,
    )


def run_terraform(
    binary: Path | str,
    *,
    destroy: bool,
    runner: CommandRunnerPort,
    cwd: Path | None = None,
    extra_args: Sequence[str] = (),
) -> Result[list[CommandResult]]:
    """Run ``init`` and then ``apply`` or ``destroy``, stopping at the first failure."""
    diagnostics: list[Diagnostic] = []
    completed: list[CommandResult] = []
    for step in plan_steps(binary, destroy=destroy, cwd=cwd, extra_args=extra_args):
        logger.info("Running terraform %s", step.name)
        outcome = runner.run(step.invocation)
        if not outcome.success:
            diagnostics.append(_step_failed(step, outcome))
            return Result(diagnostics=diagnostics)
        stderr_text = outcome.stderr_text.strip()
        if stderr_text:
            logger.warning("terraform %s wrote to stderr: %s", step.name, stderr_text)
            diagnostics.append(
                Diagnostic(
                    code="TERRAFORM_STDERR",
                    rule=f"terraform.{step.name}",
                    severity=Severity.WARN,
                    message=stderr_text,
                    details={"step": step.name},
                )
            )
        completed.append(outcome)

    logger.info("Changes %s successfully", "destroyed" if destroy else "applied")
    return Result(value=completed, diagnostics=diagnostics)
