"""Shared test fixtures."""

import pytest


@pytest.fixture
def mock_process(monkeypatch):
    """Mock process.spawn/wait/wait_with_output for tests.

    Append (returncode, stdout, stderr) tuples, or an exception to raise, to
    ``responses``; each wait call consumes one.
    """
    from bossy import process

    calls = []
    responses = []

    class FakePopen:
        pid = 4242
        stdin = None

        def kill(self):
            calls.append(("kill",))

        def terminate(self):
            calls.append(("terminate",))

    def _next_response():
        response = responses.pop(0) if responses else (0, b"", b"")
        if isinstance(response, BaseException):
            raise response
        return response

    def fake_spawn(args, env=None, cwd=None, stdin=None, stdout=None, stderr=None):
        calls.append(("spawn", args, env, cwd, (stdin, stdout, stderr)))
        return FakePopen()

    def fake_wait(proc):
        calls.append(("wait",))
        return _next_response()[0]

    def fake_wait_with_output(proc):
        calls.append(("wait_with_output",))
        return _next_response()

    monkeypatch.setattr(process, "spawn", fake_spawn)
    monkeypatch.setattr(process, "wait", fake_wait)
    monkeypatch.setattr(process, "wait_with_output", fake_wait_with_output)

    return type("MockProcess", (), {"calls": calls, "responses": responses})()
