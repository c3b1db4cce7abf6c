"""Failure taxonomy: every way running a command can go wrong."""

from dataclasses import dataclass

from bossy.output import ExitStatus, Output


class Cause:
    """Base for the four failure causes. Never instantiated directly."""

    @property
    def status(self) -> ExitStatus | None:
        return None

    @property
    def output(self) -> Output | None:
        return None


@dataclass(frozen=True)
class SpawnFailed(Cause):
    error: OSError

    def __str__(self) -> str:
        return f"failed to spawn child process: {self.error}"


@dataclass(frozen=True)
class WaitFailed(Cause):
    error: OSError

    def __str__(self) -> str:
        return f"failed while waiting for child process to exit: {self.error}"


def _describe_status(status: ExitStatus) -> str:
    if status.code is not None:
        return f"didn't complete successfully, exiting with code {status.code}."
    return f"didn't complete successfully, terminated by signal {status.signal}."


@dataclass(frozen=True)
class CommandFailed(Cause):
    exit_status: ExitStatus

    @property
    def status(self) -> ExitStatus:
        return self.exit_status

    def __str__(self) -> str:
        return _describe_status(self.exit_status)


@dataclass(frozen=True)
class CommandFailedWithOutput(Cause):
    captured: Output

    @property
    def status(self) -> ExitStatus:
        return self.captured.status

    @property
    def output(self) -> Output:
        return self.captured

    def __str__(self) -> str:
        text = _describe_status(self.captured.status)
        if self.captured.stderr:
            stderr = self.captured.stderr.decode("utf-8", errors="replace")
            return f"{text} stderr contents: {stderr}"
        return f"{text} stderr was empty."


class Error(Exception):
    """A command failed. Carries the command's display string and the cause.

    The convenience accessors return None for causes that don't carry the
    requested data, so callers rarely need to look at ``cause`` directly.
    """

    def __init__(self, command: str, cause: Cause):
        self.command = command
        self.cause = cause
        super().__init__(command, cause)

    def __str__(self) -> str:
        return f"Command {self.command!r} {self.cause}"

    @classmethod
    def from_returncode(cls, command: str, returncode: int) -> ExitStatus:
        """Return the status on success, raise CommandFailed otherwise."""
        status = ExitStatus(returncode)
        if not status.success():
            raise cls(command, CommandFailed(status))
        return status

    @classmethod
    def from_output(cls, command: str, returncode: int, stdout: bytes, stderr: bytes) -> Output:
        """Return the output on success, raise CommandFailedWithOutput otherwise."""
        output = Output(ExitStatus(returncode), stdout, stderr)
        if not output.success():
            raise cls(command, CommandFailedWithOutput(output))
        return output

    @property
    def status(self) -> ExitStatus | None:
        return self.cause.status

    @property
    def output(self) -> Output | None:
        return self.cause.output

    @property
    def stdout(self) -> bytes | None:
        return self.output.stdout if self.output is not None else None

    @property
    def stderr(self) -> bytes | None:
        return self.output.stderr if self.output is not None else None

    def stdout_str(self) -> str | None:
        return self.output.stdout_str() if self.output is not None else None

    def stderr_str(self) -> str | None:
        return self.output.stderr_str() if self.output is not None else None
