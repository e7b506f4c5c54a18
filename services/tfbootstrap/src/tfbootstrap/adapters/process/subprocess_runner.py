"""Run one external command, echoing its stdout live while capturing both streams.

The child's stdout is drained on a worker thread and its stderr on the calling
thread. ``Popen.wait`` is only reached after both streams hit end-of-stream.

stderr is buffered, not echoed. It is attached to every result and becomes
the failure message when the command exits non-zero.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
import shlex
import signal
import subprocess
import sys
import threading
from typing import IO, BinaryIO

from tfbootstrap.domain.failure import CommandFailure, FailureKind
from tfbootstrap.domain.settings import DEFAULT_CHUNK_SIZE
from tfbootstrap.ports.command_runner import CommandInvocation, CommandResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capture:
    data: bytes
    error: OSError | None = None


def capture(
    source: IO[bytes],
    sink: BinaryIO | None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    buffer: bytearray | None = None,
) -> Capture:
    """Drain ``source`` to end-of-stream, echoing each chunk to ``sink``.

    Each chunk is appended to ``buffer`` and written to the sink before the
    next read. A failed write stops the echo but the drain keeps going, so the
    writer on the other end of the pipe is never left blocked. A failed read
    ends the drain. Either error is returned on the capture, not raised.
    """
    captured = buffer if buffer is not None else bytearray()
    write_error: OSError | None = None
    while True:
        try:
            chunk = source.read(chunk_size)
        except OSError as e:
            return Capture(bytes(captured), e)
        if not chunk:
            return Capture(bytes(captured), write_error)
        captured += chunk
        if sink is None or write_error is not None:
            continue
        try:
            sink.write(chunk)
            sink.flush()
        except OSError as e:
            write_error = e


def _discard(source: IO[bytes], chunk_size: int) -> None:
    try:
        while source.read(chunk_size):
            pass
    except OSError as e:
        logger.debug("Stopped discarding after read error: %s", e)


class _Drain:
    """Drain state for one stream; owned by the single thread that runs it."""

    def __init__(
        self, source: IO[bytes] | None, sink: BinaryIO | None, chunk_size: int
    ) -> None:
        if source is None:
            raise ValueError("stream was not opened as a pipe")
        self.source = source
        self.sink = sink
        self.chunk_size = chunk_size
        self.buffer = bytearray()
        self.error: OSError | None = None
        self.failure: Exception | None = None

    @property
    def data(self) -> bytes:
        return bytes(self.buffer)

    def run(self) -> None:
        try:
            result = capture(self.source, self.sink, self.chunk_size, self.buffer)
            self.error = result.error
        except Exception as e:
            self.failure = e
            _discard(self.source, self.chunk_size)


class SubprocessCommandRunner:
    def __init__(
        self,
        stdout_sink: BinaryIO | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout_seconds: float | None = None,
    ) -> None:
        self.stdout_sink = stdout_sink
        self.chunk_size = chunk_size
        self.timeout_seconds = timeout_seconds

    def _resolve_sink(self) -> BinaryIO | None:
        if self.stdout_sink is not None:
            return self.stdout_sink
        stdout = sys.stdout
        if stdout is None:
            return None
        stdout.flush()
        return getattr(stdout, "buffer", None)

    @property
    def _own_process_group(self) -> bool:
        # Only a timed run is detached from the terminal, so Ctrl-C still
        # reaches terraform otherwise.
        return self.timeout_seconds is not None and hasattr(os, "killpg")

    def _start_watchdog(
        self, process: subprocess.Popen[bytes], expired: threading.Event
    ) -> threading.Timer | None:
        if self.timeout_seconds is None:
            return None
        timeout = self.timeout_seconds

        def _expire() -> None:
            expired.set()
            logger.warning("Killing pid %s after %ss timeout", process.pid, timeout)
            if not self._own_process_group:
                process.kill()
                return
            # Grandchildren hold the pipes too, even after the child has exited.
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                logger.debug("Process group %s already gone", process.pid)

        timer = threading.Timer(timeout, _expire)
        timer.daemon = True
        timer.start()
        return timer

    def run(self, invocation: CommandInvocation) -> CommandResult:
        argv = invocation.argv()
        sink = self._resolve_sink()
        if sink is None:
            return CommandResult(
                invocation=invocation,
                exit_code=None,
                failure=CommandFailure(
                    FailureKind.CAPTURE_FAILURE,
                    "sys.stdout has no binary buffer to echo into",
                    details={"stream": "stdout"},
                ),
            )
        logger.debug("Running %s", shlex.join(argv))
        try:
            process = subprocess.Popen(
                argv,
                cwd=invocation.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
                start_new_session=self._own_process_group,
            )
        except OSError as e:
            return CommandResult(
                invocation=invocation,
                exit_code=None,
                failure=CommandFailure(
                    FailureKind.START_FAILURE,
                    f"Failed to start {invocation.executable}: {e.strerror or e}",
                    cause=e,
                ),
            )

        expired = threading.Event()
        watchdog = self._start_watchdog(process, expired)
        try:
            with process:
                stdout_drain = _Drain(process.stdout, sink, self.chunk_size)
                stderr_drain = _Drain(process.stderr, None, self.chunk_size)
                worker = threading.Thread(
                    target=stdout_drain.run,
                    name=f"drain-stdout-{process.pid}",
                    daemon=True,
                )
                worker.start()
                stderr_drain.run()
                worker.join()
                exit_code = process.wait()
        finally:
            if watchdog is not None:
                watchdog.cancel()

        logger.debug("%s exited with status %s", invocation.executable, exit_code)
        failure = _classify(
            argv,
            exit_code,
            stdout_drain,
            stderr_drain,
            timed_out_after=(
                self.timeout_seconds if expired.is_set() and exit_code != 0 else None
            ),
        )
        return CommandResult(
            invocation=invocation,
            exit_code=exit_code,
            stdout=stdout_drain.data,
            stderr=stderr_drain.data,
            failure=failure,
        )


def _classify(
    argv: list[str],
    exit_code: int,
    stdout_drain: _Drain,
    stderr_drain: _Drain,
    timed_out_after: float | None,
) -> CommandFailure | None:
    stderr = stderr_drain.data
    if timed_out_after is not None:
        return CommandFailure(
            FailureKind.TIMEOUT,
            f"{argv[0]} timed out after {timed_out_after}s and was killed",
            cause=subprocess.TimeoutExpired(argv, timed_out_after, stderr=stderr),
            details={"exit_code": exit_code},
        )
    if exit_code != 0:
        exit_error = subprocess.CalledProcessError(exit_code, argv, stderr=stderr)
        text = stderr.decode("utf-8", errors="replace").strip()
        return CommandFailure(
            FailureKind.NON_ZERO_EXIT,
            text or str(exit_error),
            cause=exit_error,
            details={"exit_code": exit_code},
        )
    for name, drain in (("stdout", stdout_drain), ("stderr", stderr_drain)):
        if drain.error is not None:
            return CommandFailure(
                FailureKind.STREAM_ERROR,
                f"I/O error on {name}: {drain.error}",
                cause=drain.error,
                details={"stream": name},
            )
    for name, drain in (("stdout", stdout_drain), ("stderr", stderr_drain)):
        if drain.failure is not None:
            return CommandFailure(
                FailureKind.CAPTURE_FAILURE,
                f"Failed to capture {name}: {drain.failure}",
                cause=drain.failure,
                details={"stream": name},
            )
    return None
