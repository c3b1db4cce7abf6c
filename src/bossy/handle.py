"""Handle to a running child process: must be waited on exactly once."""

import logging
import subprocess
from dataclasses import dataclass
from typing import IO

from bossy import process
from bossy.error import Error, WaitFailed
from bossy.output import ExitStatus, Output

logger = logging.getLogger(__name__)


class HandleConsumedError(RuntimeError):
    """A Handle was used after wait() or wait_for_output() already consumed it."""


@dataclass
class _Inner:
    command: str
    proc: subprocess.Popen


class Handle:
    """A running child process.

    You must call either ``wait`` or ``wait_for_output`` to consume the
    handle. A handle that is garbage-collected, or leaves a ``with`` block,
    without being waited on logs an error naming its command.
    """

    def __init__(self, command: str, proc: subprocess.Popen):
        self._inner: _Inner | None = _Inner(command, proc)

    def __del__(self):
        if getattr(self, "_inner", None) is not None:
            self._abandon()

    def __enter__(self) -> "Handle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._inner is not None:
            self._abandon()

    def __repr__(self) -> str:
        if self._inner is None:
            return "<Handle consumed>"
        return f"<Handle command={self._inner.command!r} pid={self._inner.proc.pid}>"

    def _abandon(self) -> None:
        inner, self._inner = self._inner, None
        logger.error("handle for command %r dropped without being waited on", inner.command)

    def _current(self) -> _Inner:
        if self._inner is None:
            raise HandleConsumedError("developer error: Handle already consumed")
        return self._inner

    def _take(self) -> _Inner:
        inner = self._current()
        self._inner = None
        return inner

    @property
    def command(self) -> str:
        return self._current().command

    @property
    def pid(self) -> int:
        return self._current().proc.pid

    @property
    def stdin(self) -> IO[bytes] | None:
        """The child's stdin, if it was piped. Close it when done writing."""
        return self._current().proc.stdin

    def kill(self) -> None:
        """Send SIGKILL. Doesn't wait; you still have to wait() to reap the process."""
        self._current().proc.kill()

    def terminate(self) -> None:
        """Send SIGTERM. Doesn't wait; you still have to wait() to reap the process."""
        self._current().proc.terminate()

    def wait(self) -> ExitStatus:
        """Block until the process exits. Raises Error unless it exited successfully."""
        inner = self._take()
        logger.info("waiting for command %r to exit", inner.command)
        try:
            if inner.proc.stdin is not None:
                try:
                    inner.proc.stdin.close()
                except BrokenPipeError:
                    # child exited without reading all of its input
                    pass
            returncode = process.wait(inner.proc)
        except OSError as e:
            raise Error(inner.command, WaitFailed(e)) from e
        return Error.from_returncode(inner.command, returncode)

    def wait_for_output(self) -> Output:
        """Block until the process exits, collecting piped stdout/stderr.

        Raises Error unless it exited successfully; on a non-zero exit the
        error carries the full Output.
        """
        inner = self._take()
        logger.info("waiting for output of command %r", inner.command)
        try:
            returncode, stdout, stderr = process.wait_with_output(inner.proc)
        except OSError as e:
            raise Error(inner.command, WaitFailed(e)) from e
        return Error.from_output(inner.command, returncode, stdout, stderr)
