"""Subprocess wrapper: the only module that touches the OS, and the mock seam for tests."""

import subprocess
from collections.abc import Mapping, Sequence
from typing import IO, Any

StdioArg = int | IO[Any] | None


def spawn(
    args: Sequence[Any],
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    stdin: StdioArg = None,
    stdout: StdioArg = None,
    stderr: StdioArg = None,
) -> subprocess.Popen:
    """Start a child process in binary mode. Raises OSError if it can't be created."""
    return subprocess.Popen(
        list(args),
        env=env,
        cwd=cwd,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
    )


def wait(proc: subprocess.Popen) -> int:
    """Block until the process exits. Returns its returncode."""
    return proc.wait()


def wait_with_output(proc: subprocess.Popen) -> tuple[int, bytes, bytes]:
    """Drain piped stdout/stderr and wait, as one communicate() call.

    Streams that weren't piped come back empty. A stdin the caller already
    closed is left alone; communicate() would otherwise try to flush it.
    """
    if proc.stdin is not None and proc.stdin.closed:
        proc.stdin = None
    stdout, stderr = proc.communicate()
    return proc.returncode, stdout or b"", stderr or b""
