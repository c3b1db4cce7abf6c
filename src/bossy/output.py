"""Exit status + captured output of a finished process."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExitStatus:
    """How a child process ended.

    Mirrors ``Popen.returncode``: a negative value means the process was
    terminated by that signal number.
    """

    returncode: int

    @property
    def code(self) -> int | None:
        return self.returncode if self.returncode >= 0 else None

    @property
    def signal(self) -> int | None:
        return -self.returncode if self.returncode < 0 else None

    def success(self) -> bool:
        return self.returncode == 0

    def __str__(self) -> str:
        if self.signal is not None:
            return f"signal: {self.signal}"
        return f"exit code: {self.code}"


@dataclass(frozen=True)
class Output:
    status: ExitStatus
    stdout: bytes
    stderr: bytes

    def success(self) -> bool:
        return self.status.success()

    def stdout_str(self) -> str:
        """Decode stdout as UTF-8. Raises UnicodeDecodeError on invalid bytes."""
        return self.stdout.decode("utf-8")

    def stderr_str(self) -> str:
        """Decode stderr as UTF-8. Raises UnicodeDecodeError on invalid bytes."""
        return self.stderr.decode("utf-8")
