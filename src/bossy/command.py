"""Command builder: configure, then run."""

import copy
import enum
import logging
import os
import subprocess
from collections.abc import Iterable, Mapping
from typing import IO, Any

from bossy import process
from bossy.error import Error, SpawnFailed
from bossy.handle import Handle
from bossy.output import ExitStatus, Output

logger = logging.getLogger(__name__)

StrOrPath = str | bytes | os.PathLike


class Stdio(enum.Enum):
    """Where a standard stream of the child goes."""

    INHERIT = "inherit"
    NULL = "null"
    PIPED = "piped"

    def __str__(self) -> str:
        return self.value


StdioConfig = Stdio | int | IO[Any]

_POPEN_STDIO = {
    Stdio.INHERIT: None,
    Stdio.NULL: subprocess.DEVNULL,
    Stdio.PIPED: subprocess.PIPE,
}


def _popen_stdio(cfg: StdioConfig) -> process.StdioArg:
    if isinstance(cfg, Stdio):
        return _POPEN_STDIO[cfg]
    if isinstance(cfg, int) and not isinstance(cfg, bool):
        return cfg
    if hasattr(cfg, "fileno"):
        return cfg
    raise TypeError(f"unsupported stdio configuration: {cfg!r}")


def _check_stdio(cfg: StdioConfig) -> StdioConfig:
    _popen_stdio(cfg)
    return cfg


class Command:
    """Build and run a command.

    Every mutator comes in two flavours: ``set_*``/``add_*`` change the
    command in place and return it for chaining; ``with_*`` return a modified
    copy and leave the original alone.

    Arguments are passed to the OS as discrete tokens. Nothing is ever run
    through a shell, and nothing is quoted or escaped.
    """

    def __init__(self, name: StrOrPath, pure: bool = False):
        self._name = name
        self._args: list[StrOrPath] = []
        self._env: dict[str, str] = {}
        self._pure = pure
        self._cwd: str | None = None
        self._stdin: StdioConfig = Stdio.INHERIT
        self._stdout: StdioConfig = Stdio.INHERIT
        self._stderr: StdioConfig = Stdio.INHERIT
        self._display = ""
        self._push_display(name)

    @classmethod
    def impure(cls, name: StrOrPath) -> "Command":
        """Start building a command that inherits all env vars from the environment."""
        return cls(name, pure=False)

    @classmethod
    def pure(cls, name: StrOrPath) -> "Command":
        """Start building a command with a completely empty environment.

        At minimum you'll often want to add PATH and TERM yourself; nothing
        is added for you.
        """
        return cls(name, pure=True)

    @classmethod
    def impure_parse(cls, line: str) -> "Command":
        """Split ``line`` on whitespace into name + args, inheriting the environment.

        This is not a shell parser: quotes and escapes are not understood,
        so ``echo "a b"`` yields the args ``"a`` and ``b"``.
        """
        name, args = _tokenize(line)
        return cls.impure(name).add_args(args)

    @classmethod
    def pure_parse(cls, line: str) -> "Command":
        """Like impure_parse, but with an empty environment."""
        name, args = _tokenize(line)
        return cls.pure(name).add_args(args)

    def __str__(self) -> str:
        return self._display

    def __repr__(self) -> str:
        mode = "pure" if self._pure else "impure"
        return f"<Command {mode} {self._display!r}>"

    def _push_display(self, component: StrOrPath) -> None:
        if self._display:
            self._display += " "
        self._display += os.fsdecode(component)

    def _copy(self) -> "Command":
        other = copy.copy(self)
        other._args = list(self._args)
        other._env = dict(self._env)
        return other

    @property
    def name(self) -> StrOrPath:
        return self._name

    @property
    def args(self) -> tuple[StrOrPath, ...]:
        return tuple(self._args)

    @property
    def is_pure(self) -> bool:
        return self._pure

    def display(self) -> str:
        """The command's string representation: name and args, space-joined."""
        return self._display

    def environment(self) -> dict[str, str]:
        """The environment the child will be started with."""
        if self._pure:
            return dict(self._env)
        return {**os.environ, **self._env}

    # stdio

    def set_stdin(self, cfg: StdioConfig) -> "Command":
        logger.debug("setting stdin to %s on command %r", cfg, self._display)
        self._stdin = _check_stdio(cfg)
        return self

    def with_stdin(self, cfg: StdioConfig) -> "Command":
        return self._copy().set_stdin(cfg)

    def set_stdin_piped(self) -> "Command":
        return self.set_stdin(Stdio.PIPED)

    def with_stdin_piped(self) -> "Command":
        return self._copy().set_stdin_piped()

    def set_stdout(self, cfg: StdioConfig) -> "Command":
        logger.debug("setting stdout to %s on command %r", cfg, self._display)
        self._stdout = _check_stdio(cfg)
        return self

    def with_stdout(self, cfg: StdioConfig) -> "Command":
        return self._copy().set_stdout(cfg)

    def set_stdout_piped(self) -> "Command":
        return self.set_stdout(Stdio.PIPED)

    def with_stdout_piped(self) -> "Command":
        return self._copy().set_stdout_piped()

    def set_stderr(self, cfg: StdioConfig) -> "Command":
        logger.debug("setting stderr to %s on command %r", cfg, self._display)
        self._stderr = _check_stdio(cfg)
        return self

    def with_stderr(self, cfg: StdioConfig) -> "Command":
        return self._copy().set_stderr(cfg)

    def set_stderr_piped(self) -> "Command":
        return self.set_stderr(Stdio.PIPED)

    def with_stderr_piped(self) -> "Command":
        return self._copy().set_stderr_piped()

    # environment

    def add_env_var(self, key: StrOrPath, val: StrOrPath) -> "Command":
        key, val = os.fsdecode(key), os.fsdecode(val)
        logger.debug("adding env var %r = %r to command %r", key, val, self._display)
        self._env[key] = val
        return self

    def with_env_var(self, key: StrOrPath, val: StrOrPath) -> "Command":
        return self._copy().add_env_var(key, val)

    def add_env_vars(
        self, env_vars: Mapping[str, StrOrPath] | Iterable[tuple[StrOrPath, StrOrPath]]
    ) -> "Command":
        items = env_vars.items() if isinstance(env_vars, Mapping) else env_vars
        for key, val in items:
            self.add_env_var(key, val)
        return self

    def with_env_vars(
        self, env_vars: Mapping[str, StrOrPath] | Iterable[tuple[StrOrPath, StrOrPath]]
    ) -> "Command":
        return self._copy().add_env_vars(env_vars)

    # arguments

    def add_arg(self, arg: StrOrPath) -> "Command":
        text = os.fsdecode(arg)
        logger.debug("adding arg %r to command %r", text, self._display)
        self._args.append(arg)
        self._push_display(text)
        return self

    def with_arg(self, arg: StrOrPath) -> "Command":
        return self._copy().add_arg(arg)

    def add_args(self, args: Iterable[StrOrPath]) -> "Command":
        for arg in args:
            self.add_arg(arg)
        return self

    def with_args(self, args: Iterable[StrOrPath]) -> "Command":
        return self._copy().add_args(args)

    # working directory

    def set_current_dir(self, path: StrOrPath) -> "Command":
        path = os.fsdecode(path)
        logger.debug("setting current dir to %r on command %r", path, self._display)
        self._cwd = path
        return self

    def with_current_dir(self, path: StrOrPath) -> "Command":
        return self._copy().set_current_dir(path)

    # running

    def _run_inner(self) -> Handle:
        try:
            proc = process.spawn(
                [self._name, *self._args],
                env=self.environment(),
                cwd=self._cwd,
                stdin=_popen_stdio(self._stdin),
                stdout=_popen_stdio(self._stdout),
                stderr=_popen_stdio(self._stderr),
            )
        except OSError as e:
            raise Error(self._display, SpawnFailed(e)) from e
        return Handle(self._display, proc)

    def run(self) -> Handle:
        """Start the command and return a Handle to it.

        This lets you decide when blocking happens. If you don't care,
        run_and_wait and run_and_wait_for_output are better picks.
        """
        logger.info("running command %r", self._display)
        return self._run_inner()

    def run_and_wait(self) -> ExitStatus:
        """Run the command and block until it exits."""
        logger.info("running command %r and waiting for exit", self._display)
        return self._run_inner().wait()

    def run_and_wait_for_output(self) -> Output:
        """Run the command and block until its output is collected.

        Always sets stdout and stderr to piped on this command, whatever
        they were before. Use run() and manage the Handle yourself if you
        need something else.
        """
        logger.info("running command %r and waiting for output", self._display)
        return self.set_stdout_piped().set_stderr_piped()._run_inner().wait_for_output()


def _tokenize(line: str) -> tuple[str, list[str]]:
    tokens = line.split()
    if not tokens:
        raise ValueError("command line is empty")
    return tokens[0], tokens[1:]
