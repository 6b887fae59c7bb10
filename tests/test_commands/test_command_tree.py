"""Tests for clicore.commands.

Covers:
- build_command_tree: callables, mappings, nesting, existing nodes
- Invalid trees: non-callable leaves, non-string keys, cycles
- Command names and descriptions
- The ``command`` decorator, bare and with arguments
- CommandGroup set/remove and ordering
- iter_commands
"""

from __future__ import annotations

from typing import Any

import pytest

from clicore.commands import Command, CommandGroup, build_command_tree, command, iter_commands
from clicore.exceptions import ConfigError


def greet(args: list[Any], flags: dict[str, Any]) -> str:
    """Say hello.

    Longer text that is not part of the description.
    """
    return "hello"


async def greet_async(args: list[Any], flags: dict[str, Any]) -> str:
    return "hello"


# ------------------------------------------------------------------ #
# build_command_tree
# ------------------------------------------------------------------ #


class TestBuildCommandTree:
    def test_single_callable(self) -> None:
        node = build_command_tree(greet)
        assert isinstance(node, Command)
        assert node.callback is greet

    def test_mapping_becomes_group(self, sample_commands: dict[str, Any]) -> None:
        tree = build_command_tree(sample_commands)
        assert isinstance(tree, CommandGroup)
        assert list(tree) == ["math", "echo", "silent"]
        assert isinstance(tree["math"], CommandGroup)
        assert isinstance(tree["math"]["operations"]["calculate"], Command)

    def test_leaf_named_after_key(self) -> None:
        tree = build_command_tree({"hi": lambda args, flags: "x"})
        assert tree["hi"].name == "hi"

    def test_existing_nodes_are_kept(self) -> None:
        leaf = Command(greet, name="custom")
        group = CommandGroup({"leaf": leaf}, description="Group")
        tree = build_command_tree({"g": group})
        assert tree["g"]["leaf"] is leaf
        assert tree["g"].description == "Group"

    def test_empty_mapping(self) -> None:
        tree = build_command_tree({})
        assert isinstance(tree, CommandGroup)
        assert len(tree) == 0

    def test_input_is_not_mutated(self) -> None:
        tree = {"a": {"b": greet}}
        build_command_tree(tree)
        assert tree == {"a": {"b": greet}}

    @pytest.mark.parametrize("value", [None, 42, "text", ["a"]])
    def test_invalid_leaf(self, value: Any) -> None:
        with pytest.raises(ConfigError, match='Invalid command at "bad"'):
            build_command_tree({"bad": value})

    def test_invalid_root(self) -> None:
        with pytest.raises(ConfigError, match="<root>"):
            build_command_tree(None)

    def test_non_string_key(self) -> None:
        with pytest.raises(ConfigError, match="must be strings"):
            build_command_tree({"group": {1: greet}})

    def test_cycle(self) -> None:
        tree: dict[str, Any] = {"a": {}}
        tree["a"]["loop"] = tree
        with pytest.raises(ConfigError, match="cycle"):
            build_command_tree(tree)

    def test_shared_subtree_is_not_a_cycle(self) -> None:
        shared = {"leaf": greet}
        tree = build_command_tree({"a": shared, "b": shared})
        assert isinstance(tree["a"]["leaf"], Command)
        assert isinstance(tree["b"]["leaf"], Command)


# ------------------------------------------------------------------ #
# Command
# ------------------------------------------------------------------ #


class TestCommand:
    def test_description_from_docstring(self) -> None:
        assert Command(greet).description == "Say hello."

    def test_explicit_name_and_description(self) -> None:
        cmd = Command(greet, name="hi", description="Greets")
        assert cmd.name == "hi"
        assert cmd.description == "Greets"

    def test_no_docstring(self) -> None:
        assert Command(greet_async).description is None

    def test_call(self) -> None:
        assert Command(greet)([], {}) == "hello"

    def test_is_async(self) -> None:
        assert Command(greet_async).is_async is True
        assert Command(greet).is_async is False

    def test_not_callable(self) -> None:
        with pytest.raises(ConfigError, match="must be callable"):
            Command("nope")  # type: ignore[arg-type]


class TestCommandDecorator:
    def test_bare(self) -> None:
        @command
        def status(args: list[Any], flags: dict[str, Any]) -> str:
            """Show status."""
            return "up"

        assert isinstance(status, Command)
        assert status.name == "status"
        assert status.description == "Show status."

    def test_with_arguments(self) -> None:
        @command(name="st", description="Short status")
        def status(args: list[Any], flags: dict[str, Any]) -> str:
            return "up"

        assert status.name == "st"
        assert status.description == "Short status"
        assert status([], {}) == "up"


# ------------------------------------------------------------------ #
# CommandGroup
# ------------------------------------------------------------------ #


class TestCommandGroup:
    def test_set_and_remove(self) -> None:
        group = CommandGroup()
        group.set("greet", Command(greet))
        assert "greet" in group
        removed = group.remove("greet")
        assert isinstance(removed, Command)
        assert "greet" not in group

    def test_remove_missing(self) -> None:
        assert CommandGroup().remove("nope") is None

    def test_replace_keeps_position(self) -> None:
        group = CommandGroup({"a": Command(greet), "b": Command(greet)})
        group.set("a", Command(greet_async))
        assert list(group) == ["a", "b"]
        assert group["a"].is_async


class TestIterCommands:
    def test_depth_first(self, sample_commands: dict[str, Any]) -> None:
        chains = [chain for chain, _ in iter_commands(build_command_tree(sample_commands))]
        assert chains == [("math", "operations", "calculate"), ("echo",), ("silent",)]

    def test_single_command(self) -> None:
        assert [chain for chain, _ in iter_commands(build_command_tree(greet))] == [()]
