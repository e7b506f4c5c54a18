from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tfbootstrap.domain.json_types import JsonDict


class FailureKind(str, Enum):
    START_FAILURE = "start_failure"
    STREAM_ERROR = "stream_error"
    CAPTURE_FAILURE = "capture_failure"
    NON_ZERO_EXIT = "non_zero_exit"
    TIMEOUT = "timeout"


@dataclass
class CommandFailure(Exception):
    """Why a single command invocation did not succeed.

    Carried on the command result rather than raised by the runner, so
    callers can branch on ``kind`` without parsing message text.
    """

    kind: FailureKind
    message: str
    cause: BaseException | None = None
    details: JsonDict | None = None

    def __str__(self) -> str:
        return self.message
