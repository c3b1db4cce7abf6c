from bossy.command import Command, Stdio
from bossy.error import (
    Cause,
    CommandFailed,
    CommandFailedWithOutput,
    Error,
    SpawnFailed,
    WaitFailed,
)
from bossy.handle import Handle, HandleConsumedError
from bossy.output import ExitStatus, Output

try:
    from importlib.metadata import version

    __version__ = version("bossy")
except Exception:
    __version__ = "0.0.0"

__all__ = [
    "Cause",
    "Command",
    "CommandFailed",
    "CommandFailedWithOutput",
    "Error",
    "ExitStatus",
    "Handle",
    "HandleConsumedError",
    "Output",
    "SpawnFailed",
    "Stdio",
    "WaitFailed",
]
