"""Shared fixtures."""

import pytest

from cmdpp.shell.builtins import CommandRegistry
from cmdpp.shell.interpreter import ExecutionContext, ShellInterpreter


@pytest.fixture
def context(tmp_path, monkeypatch):
    """Execution context rooted at a temporary directory with a private environment."""
    monkeypatch.chdir(tmp_path)
    return ExecutionContext(cwd=tmp_path, environ={})


@pytest.fixture
def interpreter(context):
    """Interpreter with the bundled commands."""
    return ShellInterpreter(context)


class Recorder:
    """Command handler that records every invocation."""

    description = "records calls"

    def __init__(self):
        self.calls = []

    def execute(self, arguments, context):
        self.calls.append([token.text for token in arguments])


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def bare_interpreter(context):
    """Interpreter with an empty registry."""
    return ShellInterpreter(context, registry=CommandRegistry())
