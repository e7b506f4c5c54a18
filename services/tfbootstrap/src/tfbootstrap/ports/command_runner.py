from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tfbootstrap.domain.failure import CommandFailure


@dataclass(frozen=True)
class CommandInvocation:
    executable: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None

    def argv(self) -> list[str]:
        return [self.executable, *self.args]


@dataclass(frozen=True)
class CommandResult:
    invocation: CommandInvocation
    exit_code: int | None
    stdout: bytes = b""
    stderr: bytes = b""
    failure: CommandFailure | None = None

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


class CommandRunnerPort(Protocol):
    def run(self, invocation: CommandInvocation) -> CommandResult: ...
