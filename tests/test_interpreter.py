"""Tests for the resolution chain and session state."""

import os

import pytest

from cmdpp.lib.config_parser import InterpreterConfig, ShellConfig
from cmdpp.shell.builtins import CommandRegistry
from cmdpp.shell.interpreter import ExecutionContext, ExecutionTiming, ShellInterpreter

posix_only = pytest.mark.skipif(os.name != "posix", reason="requires execute permission bits")


@pytest.fixture
def launches(monkeypatch):
    """Capture executable launches instead of starting processes."""
    calls = []

    def fake_launch(path, arguments=(), cwd=None, env=None):
        calls.append((path.name, list(arguments)))
        return 0

    monkeypatch.setattr("cmdpp.shell.interpreter.launch_executable", fake_launch)
    return calls


@pytest.fixture
def shell(bare_interpreter, recorder):
    """Interpreter whose only builtin is 'rec'."""
    bare_interpreter.registry.add("rec", recorder)
    return bare_interpreter


def write_script(directory, name, text):
    path = directory / name
    path.write_text(text)
    return path


def make_executable(path):
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path


class TestExecutionTiming:
    """Test timing unit conversion."""

    def test_units_derived_from_microseconds(self):
        """Test every unit comes from the same measurement."""
        timing = ExecutionTiming(1500)
        assert timing.milliseconds == 1.5
        assert timing.seconds == 0.0015
        assert timing.minutes == pytest.approx(1500 / 60000000)

    def test_report_lines(self):
        """Test the report layout."""
        assert ExecutionTiming(1500).report_lines() == [
            "Execution time:",
            "1500 microseconds",
            "1.5 milliseconds",
            "0.0015 seconds",
            "2.5e-05 minutes",
        ]


class TestExecutionContext:
    """Test session state."""

    def test_defaults(self, tmp_path):
        """Test default configuration and environment."""
        context = ExecutionContext(cwd=tmp_path)
        assert context.cwd == str(tmp_path)
        assert context.environ is os.environ
        assert context.timing_enabled is False
        assert context.config.shell.script_extension == ".shl"

    def test_timing_from_config(self, tmp_path):
        """Test the timing flag starts from configuration."""
        config = ShellConfig(shell=InterpreterConfig(timing_enabled=True))
        assert ExecutionContext(config, cwd=tmp_path).timing_enabled is True

    def test_change_directory(self, context, tmp_path):
        """Test changing into a subdirectory updates both directories."""
        (tmp_path / "sub").mkdir()
        new_cwd = context.change_directory("sub")
        assert new_cwd == str((tmp_path / "sub").resolve())
        assert context.cwd == new_cwd
        assert os.getcwd() == new_cwd

    def test_change_directory_invalid(self, context, tmp_path):
        """Test an invalid target leaves the directory unchanged."""
        with pytest.raises(NotADirectoryError, match="Invalid directory: nowhere"):
            context.change_directory("nowhere")
        assert context.cwd == str(tmp_path)

    def test_toggle_timing(self, context):
        """Test toggling flips the flag."""
        assert context.toggle_timing() is True
        assert context.toggle_timing() is False


class TestLineBoundary:
    """Test per-line error containment."""

    def test_blank_and_comment_lines_skipped(self, shell, recorder):
        """Test that blank and comment lines do nothing."""
        assert shell.execute_line("   ")
        assert shell.execute_line("# rec nothing")
        assert recorder.calls == []
        assert shell.context.get_history() == []

    def test_history(self, shell):
        """Test executed lines are recorded."""
        shell.execute_line("rec a")
        shell.execute_line("  rec b  ")
        assert shell.context.get_history() == ["rec a", "rec b"]
        shell.context.clear_history()
        assert shell.context.get_history() == []

    def test_unknown_command(self, shell, capsys):
        """Test an unresolvable name is reported."""
        assert shell.execute_line("frobnicate now") is False
        assert "Unknown command: frobnicate" in capsys.readouterr().err

    def test_handler_exception_contained(self, shell, capsys):
        """Test a crashing handler does not escape the line."""
        def boom(arguments, context):
            raise RuntimeError("boom")

        shell.registry.register("boom")(boom)
        assert shell.execute_line("boom") is False
        assert "Error: boom" in capsys.readouterr().err
        assert shell.execute_line("rec after")


class TestResolutionOrder:
    """Test the fixed priority of the resolution chain."""

    def test_builtin(self, shell, recorder):
        """Test builtins receive their argument tokens."""
        shell.execute_line('rec a "b c"')
        assert recorder.calls == [["a", "b c"]]

    @posix_only
    def test_builtin_beats_executable(self, shell, recorder, launches, tmp_path):
        """Test a builtin wins over an executable of the same name."""
        make_executable(tmp_path / "rec")
        shell.execute_line("rec x")
        assert recorder.calls == [["x"]]
        assert launches == []

    @posix_only
    def test_executable_by_permission(self, shell, launches, tmp_path):
        """Test files with the execute bit are launched with arguments."""
        make_executable(tmp_path / "tool")
        assert shell.execute_line("tool -a b")
        assert launches == [("tool", ["-a", "b"])]

    def test_executable_by_extension(self, shell, launches, tmp_path):
        """Test files with an executable extension are launched."""
        (tmp_path / "tool.exe").write_bytes(b"MZ")
        shell.execute_line("tool.exe")
        assert launches == [("tool.exe", [])]

    @posix_only
    def test_goto_beats_executable(self, shell, launches, tmp_path, capsys):
        """Test goto resolves before a file named goto."""
        make_executable(tmp_path / "goto")
        shell.execute_line("goto x")
        assert launches == []
        assert "Section not found in the file: x" in capsys.readouterr().err

    @posix_only
    def test_executable_beats_exetime(self, shell, launches, tmp_path):
        """Test an executable named exetime shadows the toggle."""
        make_executable(tmp_path / "exetime")
        shell.execute_line("exetime")
        assert launches == [("exetime", [])]
        assert shell.context.timing_enabled is False

    @posix_only
    def test_script_with_execute_bit_is_a_script(self, shell, recorder, launches, tmp_path):
        """Test the script extension is never launched as a program."""
        path = write_script(tmp_path, "run.shl", "rec ran\n")
        path.chmod(0o755)
        shell.execute_line("run.shl")
        assert launches == []
        assert recorder.calls == [["ran"]]

    def test_alias_after_builtins(self, shell, recorder):
        """Test a builtin shadows an environment variable of the same name."""
        shell.context.environ["rec"] = "something else"
        shell.execute_line("rec x")
        assert recorder.calls == [["x"]]

    def test_launch_failure_reported(self, shell, monkeypatch, tmp_path, capsys):
        """Test a process that cannot start is reported."""
        def failing(path, arguments=(), cwd=None, env=None):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("cmdpp.shell.interpreter.launch_executable", failing)
        (tmp_path / "bad.exe").write_bytes(b"")
        assert shell.execute_line("bad.exe") is False
        assert "Failed to execute command" in capsys.readouterr().err


class TestScripts:
    """Test script execution and goto."""

    def test_run_script_top_level_only(self, shell, recorder, tmp_path):
        """Test that sections only run when jumped to."""
        path = write_script(tmp_path, "main.shl", "rec one\n/-s\nrec hidden\ns-/\nrec two\n")
        shell.run_script(path)
        assert recorder.calls == [["one"], ["two"]]

    def test_goto_returns_to_caller(self, shell, recorder, tmp_path):
        """Test goto runs a section and then continues after the call."""
        path = write_script(
            tmp_path, "main.shl",
            "rec before\ngoto s\nrec after\n/-s\nrec inside\ns-/\n"
        )
        shell.run_script(path)
        assert recorder.calls == [["before"], ["inside"], ["after"]]

    def test_goto_nested_sections(self, shell, recorder, tmp_path):
        """Test sections can call other sections."""
        path = write_script(
            tmp_path, "main.shl",
            "goto a\nrec end\n/-a\nrec a1\ngoto b\nrec a2\na-/\n/-b\nrec b\nb-/\n"
        )
        shell.run_script(path)
        assert recorder.calls == [["a1"], ["b"], ["a2"], ["end"]]

    def test_goto_same_section_twice(self, shell, recorder, tmp_path):
        """Test a section may run again once it has returned."""
        path = write_script(tmp_path, "main.shl", "goto s\ngoto s\n/-s\nrec s\ns-/\n")
        shell.run_script(path)
        assert recorder.calls == [["s"], ["s"]]

    def test_goto_missing_section_continues(self, shell, recorder, tmp_path, capsys):
        """Test a missing section is reported and the script continues."""
        path = write_script(tmp_path, "main.shl", "goto nowhere\nrec next\n")
        shell.run_script(path)
        assert "Section not found in the file: nowhere" in capsys.readouterr().err
        assert recorder.calls == [["next"]]

    def test_goto_outside_script(self, shell, capsys):
        """Test goto typed interactively finds no section."""
        assert shell.execute_line("goto s") is False
        assert "Section not found in the file: s" in capsys.readouterr().err

    def test_goto_without_section(self, shell, capsys):
        """Test goto needs a section name."""
        assert shell.execute_line("goto") is False
        assert "Usage: goto <section>" in capsys.readouterr().err

    def test_goto_cycle(self, shell, recorder, tmp_path, capsys):
        """Test mutual goto is stopped instead of recursing."""
        path = write_script(
            tmp_path, "main.shl",
            "goto a\nrec done\n/-a\ngoto b\na-/\n/-b\ngoto a\nb-/\n"
        )
        shell.run_script(path)
        assert "goto cycle detected: a -> b -> a" in capsys.readouterr().err
        assert recorder.calls == [["done"]]

    def test_nested_script_has_own_sections(self, shell, recorder, tmp_path):
        """Test goto inside a nested script uses that script's sections."""
        write_script(tmp_path, "child.shl", "goto s\n/-s\nrec child\ns-/\n")
        path = write_script(tmp_path, "main.shl", "child.shl\ngoto s\n/-s\nrec parent\ns-/\n")
        shell.run_script(path)
        assert recorder.calls == [["child"], ["parent"]]

    def test_recursive_script_depth_limit(self, context, tmp_path, capsys):
        """Test a self-invoking script stops at the nesting limit."""
        config = ShellConfig(shell=InterpreterConfig(max_depth=5))
        shell = ShellInterpreter(
            ExecutionContext(config, cwd=tmp_path, environ={}),
            registry=CommandRegistry()
        )
        path = write_script(tmp_path, "loop.shl", "loop.shl\n")
        shell.run_script(path)
        assert capsys.readouterr().err.count("Maximum nesting depth (5) exceeded") == 1


class TestExetime:
    """Test the execution timing toggle."""

    def test_toggle_messages(self, shell, capsys):
        """Test exetime reports the new state."""
        shell.execute_line("exetime")
        assert "Execution timing enabled" in capsys.readouterr().out
        shell.execute_line("exetime")
        assert "Execution timing disabled" in capsys.readouterr().out

    def test_builtin_timed_when_enabled(self, shell, capsys):
        """Test builtins print a timing report while enabled."""
        shell.execute_line("rec untimed")
        assert "Execution time:" not in capsys.readouterr().out

        shell.execute_line("exetime")
        shell.execute_line("rec timed")
        out = capsys.readouterr().out
        timing = shell.context.last_timing
        assert timing is not None
        assert "Execution time:" in out
        assert f"{timing.microseconds} microseconds" in out
        assert timing.milliseconds == timing.microseconds / 1000.0


class TestAliases:
    """Test environment variables used as commands."""

    def test_alias_prepends_arguments(self, shell, recorder):
        """Test the alias value's tail comes before the typed arguments."""
        shell.context.environ["greet"] = "rec hello"
        shell.execute_line("greet world")
        assert recorder.calls == [["hello", "world"]]

    def test_alias_to_bundled_builtin(self, interpreter, capsys):
        """Test an alias resolving to echo."""
        interpreter.context.environ["say"] = "echo"
        interpreter.execute_line("say hi there")
        assert capsys.readouterr().out == "hi there\n"

    def test_alias_chain(self, shell, recorder):
        """Test aliases can name other aliases."""
        shell.context.environ.update({"a": "b 1", "b": "rec 2"})
        shell.execute_line("a 3")
        assert recorder.calls == [["2", "1", "3"]]

    def test_alias_cycle(self, shell, capsys):
        """Test mutually referencing aliases are reported."""
        shell.context.environ.update({"a": "b", "b": "a"})
        assert shell.execute_line("a") is False
        assert "alias cycle detected: a -> b -> a" in capsys.readouterr().err

    def test_empty_alias(self, shell, capsys):
        """Test an empty variable is not a command."""
        shell.context.environ["blank"] = ""
        assert shell.execute_line("blank") is False
        assert "Unknown command: blank" in capsys.readouterr().err
