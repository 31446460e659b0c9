"""Tests for the command registry."""

from cmdpp.shell.builtins import BuiltinCommand, CommandRegistry, default_registry


class TestCommandRegistry:
    """Test registering and looking up commands."""

    def test_lookup_unknown(self):
        """Test lookup of an unregistered name."""
        registry = CommandRegistry()
        assert registry.lookup("nope") is None
        assert "nope" not in registry

    def test_register_decorator_with_aliases(self):
        """Test that aliases share one handler instance."""
        registry = CommandRegistry()

        @registry.register("comp", "Compare files", aliases=("fc",))
        def comp(arguments, context):
            pass

        assert registry.lookup("comp") is registry.lookup("fc")
        assert isinstance(registry.lookup("comp"), BuiltinCommand)
        assert registry.aliases_of(registry.lookup("fc")) == ["comp", "fc"]
        assert registry.describe("fc") == "Compare files"

    def test_registration_overwrites(self, recorder):
        """Test that registering an existing name replaces it."""
        registry = CommandRegistry()
        registry.add("x", BuiltinCommand("x", "", lambda a, c: None))
        registry.add("x", recorder)
        assert registry.lookup("x") is recorder
        assert len(registry) == 1

    def test_list_commands_unique(self, recorder):
        """Test that aliased handlers are listed once."""
        registry = CommandRegistry()
        registry.add("a", recorder)
        registry.add("b", recorder)
        assert registry.list_commands() == [recorder]
        assert registry.names() == ["a", "b"]


class TestDefaultRegistry:
    """Test the bundled command set."""

    def test_bundled_commands(self):
        """Test every bundled command name is registered."""
        registry = default_registry()
        for name in [
            "echo", "cd", "cls", "cmd", "cmd++", "comp", "fc", "copy",
            "hexdump", "findstr", "xml", "encoding", "gpw", "random",
            "envvar", "rem", "schema", "quicksearch", "qs", "timer",
            "clc", "kill", "help", "time", "color",
        ]:
            assert name in registry, name

    def test_bundled_aliases_shared(self):
        """Test alias pairs resolve to the same handler."""
        registry = default_registry()
        assert registry.lookup("cmd") is registry.lookup("cmd++")
        assert registry.lookup("qs") is registry.lookup("quicksearch")
