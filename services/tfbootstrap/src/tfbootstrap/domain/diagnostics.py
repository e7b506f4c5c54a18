from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


@dataclass(frozen=True)
class FileLocation:
    """A config or install-record file, optionally narrowed to one line."""

    kind: ClassVar[str] = "file"

    path: str
    line: int | None = None

    def describe(self) -> str:
        return f"{self.path}:{self.line}" if self.line is not None else self.path


@dataclass(frozen=True)
class ValueLocation:
    """A single setting, named by its config key."""

    kind: ClassVar[str] = "value"

    field: str
    value: str

    def describe(self) -> str:
        return f"{self.field}={self.value!r}"


Location = FileLocation | ValueLocation


@dataclass(frozen=True)
class Diagnostic:
    code: str
    rule: str
    severity: Severity
    message: str
    location: Location | None = None
    hint: str | None = None
    details: dict[str, Any] | None = None
    # Execution errors (install, terraform steps) outrank validation errors.
    is_execution: bool = False

    def render(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} ({self.location.describe()})"
