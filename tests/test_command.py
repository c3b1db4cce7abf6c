"""Tests for command.py: builder, environment, running."""

import logging
import os
import shutil
import subprocess
from pathlib import Path

import pytest

from bossy.command import Command, Stdio
from bossy.error import CommandFailed, CommandFailedWithOutput, Error, SpawnFailed


def test_display_starts_with_name():
    assert Command.impure("ls").display() == "ls"


def test_display_tracks_args_in_order():
    cmd = Command.impure("git").add_arg("commit").add_args(["-m", "two words"]).with_arg("--amend")
    assert cmd.display() == "git commit -m two words --amend"
    assert str(cmd) == cmd.display()


def test_display_accepts_paths_and_bytes():
    cmd = Command.impure(Path("/bin/ls")).add_arg(Path("src")).add_arg(b"raw")
    assert cmd.display() == "/bin/ls src raw"


def test_rejected_arg_leaves_builder_unchanged():
    cmd = Command.impure("echo").add_arg("a")
    with pytest.raises(TypeError):
        cmd.add_arg(5)
    assert cmd.args == ("a",)
    assert cmd.display() == "echo a"


def test_display_unaffected_by_env_stdio_and_cwd():
    cmd = (
        Command.impure("env")
        .add_env_var("A", "1")
        .add_env_vars({"B": "2"})
        .set_stdout(Stdio.NULL)
        .set_stdin_piped()
        .set_current_dir("/")
    )
    assert cmd.display() == "env"


def test_with_forms_leave_original_untouched():
    base = Command.pure("echo").add_arg("a")
    derived = base.with_arg("b").with_env_var("K", "v").with_stdout_piped()
    assert base.display() == "echo a"
    assert base.args == ("a",)
    assert base.environment() == {}
    assert derived.display() == "echo a b"
    assert derived.environment() == {"K": "v"}


def test_set_forms_return_same_builder():
    cmd = Command.impure("echo")
    assert cmd.add_arg("a") is cmd
    assert cmd.add_env_var("K", "v") is cmd
    assert cmd.set_stderr_piped() is cmd


def test_pure_environment_contains_only_added_vars():
    cmd = Command.pure("env").add_env_var("FOO", "bar")
    assert cmd.is_pure
    assert cmd.environment() == {"FOO": "bar"}


def test_pure_does_not_inject_path():
    assert "PATH" not in Command.pure("env").environment()


def test_impure_environment_inherits_and_overrides(monkeypatch):
    monkeypatch.setenv("BOSSY_TEST_INHERITED", "parent")
    monkeypatch.setenv("BOSSY_TEST_OVERRIDDEN", "parent")
    cmd = Command.impure("env").add_env_var("BOSSY_TEST_OVERRIDDEN", "first").add_env_var(
        "BOSSY_TEST_OVERRIDDEN", "second"
    )
    env = cmd.environment()
    assert env["BOSSY_TEST_INHERITED"] == "parent"
    assert env["BOSSY_TEST_OVERRIDDEN"] == "second"


def test_add_env_vars_accepts_pairs():
    cmd = Command.pure("env").add_env_vars([("A", "1"), ("A", "2"), ("B", "3")])
    assert cmd.environment() == {"A": "2", "B": "3"}


def test_impure_parse_splits_on_whitespace():
    cmd = Command.impure_parse("  ls   -l\tsrc  ")
    assert cmd.name == "ls"
    assert cmd.args == ("-l", "src")
    assert cmd.display() == "ls -l src"
    assert not cmd.is_pure


def test_parse_does_not_understand_quotes():
    cmd = Command.pure_parse('echo "a b"')
    assert cmd.args == ('"a', 'b"')
    assert cmd.is_pure


def test_parse_rejects_empty_line():
    with pytest.raises(ValueError):
        Command.impure_parse("   ")


def test_unsupported_stdio_raises_type_error():
    with pytest.raises(TypeError):
        Command.impure("ls").set_stdout("piped")


def test_mutations_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="bossy")
    Command.impure("ls").add_arg("-l").set_stdout(Stdio.NULL).add_env_var("K", "v")
    messages = [r.getMessage() for r in caplog.records]
    assert "adding arg '-l' to command 'ls'" in messages
    assert "setting stdout to null on command 'ls -l'" in messages
    assert "adding env var 'K' = 'v' to command 'ls -l'" in messages


def test_run_passes_configuration_to_spawn(mock_process):
    handle = (
        Command.pure("tool")
        .add_args(["a", "b"])
        .add_env_var("K", "v")
        .set_current_dir("/tmp")
        .set_stdin_piped()
        .set_stdout(Stdio.NULL)
        .run()
    )
    handle.wait()
    _, args, env, cwd, (stdin, stdout, stderr) = mock_process.calls[0]
    assert args == ["tool", "a", "b"]
    assert env == {"K": "v"}
    assert cwd == "/tmp"
    assert stdin == subprocess.PIPE
    assert stdout == subprocess.DEVNULL
    assert stderr is None


def test_run_logs_before_spawning(mock_process, caplog):
    caplog.set_level(logging.INFO, logger="bossy")
    Command.impure("tool").add_arg("x").run().wait()
    assert "running command 'tool x'" in [r.getMessage() for r in caplog.records]


def test_command_can_run_more_than_once(mock_process):
    cmd = Command.impure("tool")
    cmd.run_and_wait()
    cmd.run_and_wait()
    assert [c[0] for c in mock_process.calls] == ["spawn", "wait", "spawn", "wait"]


def test_run_missing_executable_is_spawn_failed():
    with pytest.raises(Error) as exc_info:
        Command.impure("definitely-not-a-real-binary-xyz").add_arg("--help").run()
    err = exc_info.value
    assert isinstance(err.cause, SpawnFailed)
    assert isinstance(err.__cause__, FileNotFoundError)
    assert err.command == "definitely-not-a-real-binary-xyz --help"
    assert err.status is None
    assert err.output is None
    assert str(err).startswith("Command 'definitely-not-a-real-binary-xyz --help' failed to spawn")


def test_run_bad_cwd_is_spawn_failed(tmp_path):
    with pytest.raises(Error) as exc_info:
        Command.impure("true").set_current_dir(tmp_path / "missing").run_and_wait()
    assert isinstance(exc_info.value.cause, SpawnFailed)


def test_run_and_wait_success():
    status = Command.impure("true").run_and_wait()
    assert status.success()
    assert status.code == 0


def test_run_and_wait_false_is_command_failed():
    with pytest.raises(Error) as exc_info:
        Command.impure("false").run_and_wait()
    err = exc_info.value
    assert isinstance(err.cause, CommandFailed)
    assert err.status.code == 1
    assert err.output is None


def test_run_and_wait_reports_exit_code():
    with pytest.raises(Error) as exc_info:
        Command.impure("sh").add_args(["-c", "exit 42"]).run_and_wait()
    assert exc_info.value.status.code == 42
    assert str(exc_info.value) == "Command 'sh -c exit 42' didn't complete successfully, exiting with code 42."


def test_run_and_wait_for_output_captures_stdout():
    output = Command.impure("echo").add_arg("hello").run_and_wait_for_output()
    assert output.success()
    assert output.stdout == b"hello\n"
    assert output.stdout_str() == "hello\n"
    assert output.stderr == b""


def test_run_and_wait_for_output_failure_carries_stderr():
    with pytest.raises(Error) as exc_info:
        Command.impure("sh").add_args(["-c", "printf 'it broke' >&2; exit 3"]).run_and_wait_for_output()
    err = exc_info.value
    assert isinstance(err.cause, CommandFailedWithOutput)
    assert err.status.code == 3
    assert err.stderr_str() == "it broke"
    assert str(err).endswith("exiting with code 3. stderr contents: it broke")


def test_run_and_wait_for_output_failure_with_empty_stderr():
    with pytest.raises(Error) as exc_info:
        Command.impure("sh").add_args(["-c", "echo out; exit 1"]).run_and_wait_for_output()
    err = exc_info.value
    assert err.stdout == b"out\n"
    assert str(err).endswith("stderr was empty.")


def test_run_and_wait_for_output_overrides_stdio():
    cmd = Command.impure("sh").add_args(["-c", "echo out; echo err >&2"]).set_stdout(Stdio.NULL).set_stderr(Stdio.NULL)
    output = cmd.run_and_wait_for_output()
    assert output.stdout == b"out\n"
    assert output.stderr == b"err\n"


def test_pure_command_sees_only_added_vars():
    env_path = shutil.which("env")
    output = Command.pure(env_path).add_env_var("FOO", "bar").run_and_wait_for_output()
    assert output.stdout == b"FOO=bar\n"


def test_impure_command_sees_overrides(monkeypatch):
    monkeypatch.setenv("BOSSY_TEST_VAR", "parent")
    output = (
        Command.impure("sh")
        .add_args(["-c", "echo $BOSSY_TEST_VAR $PATH"])
        .add_env_var("BOSSY_TEST_VAR", "child")
        .run_and_wait_for_output()
    )
    value, path = output.stdout_str().split()
    assert value == "child"
    assert path == os.environ["PATH"]


def test_current_dir(tmp_path):
    output = Command.impure("pwd").set_current_dir(tmp_path).run_and_wait_for_output()
    assert output.stdout_str().strip() == str(tmp_path.resolve())
