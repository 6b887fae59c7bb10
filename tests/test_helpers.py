"""Tests for clicore.helpers and clicore.context.

Covers:
- Flag lookups with aliases
- Argument lookups, defaults and cloning
- require_args and MissingArgumentError
- JSON over the standard streams
- get_context inside and outside a running command
"""

from __future__ import annotations

import io
import json
from typing import Any

import pytest

from clicore.context import CommandContext, bind_context, get_context
from clicore.exceptions import InvalidUsageError, MissingArgumentError
from clicore.helpers import CommandHelpers
from clicore.models import NO_OUTPUT, Stdio
from clicore.output import Logger


def _stdio(stdin: str = "") -> Stdio:
    return Stdio(stdin=io.StringIO(stdin), stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def helpers() -> CommandHelpers:
    return CommandHelpers(
        ["first", "second"],
        {"operation": "sum", "O": "multiply", "verbose": None, "count": 0},
    )


# ------------------------------------------------------------------ #
# Flags
# ------------------------------------------------------------------ #


class TestFlags:
    def test_which_flag_prefers_first_present(self, helpers: CommandHelpers) -> None:
        assert helpers.which_flag("op", "operation", "O") == "operation"
        assert helpers.which_flag("missing", "O") == "O"
        assert helpers.which_flag("missing") is None

    def test_has_flag(self, helpers: CommandHelpers) -> None:
        assert helpers.has_flag("verbose")
        assert helpers.has_flag("v", "verbose")
        assert not helpers.has_flag("quiet", "q")

    def test_get_flag(self, helpers: CommandHelpers) -> None:
        assert helpers.get_flag("operation", "op", "O") == "sum"
        assert helpers.get_flag("verbose") is None
        assert helpers.get_flag("missing") is None

    def test_get_flag_or_default(self, helpers: CommandHelpers) -> None:
        assert helpers.get_flag_or_default("x", "missing") == "x"
        assert helpers.get_flag_or_default("x", "verbose") == "x"
        assert helpers.get_flag_or_default(5, "count") == 0


# ------------------------------------------------------------------ #
# Arguments
# ------------------------------------------------------------------ #


class TestArguments:
    def test_has_arg_at(self, helpers: CommandHelpers) -> None:
        assert helpers.has_arg_at(0)
        assert helpers.has_arg_at(1)
        assert not helpers.has_arg_at(2)
        assert not helpers.has_arg_at(-1)

    def test_get_arg_at(self, helpers: CommandHelpers) -> None:
        assert helpers.get_arg_at(1) == "second"
        assert helpers.get_arg_at(5) is None
        assert helpers.get_arg_at(-1) is None

    def test_get_arg_or_default(self, helpers: CommandHelpers) -> None:
        assert helpers.get_arg_or_default("d", 0) == "first"
        assert helpers.get_arg_or_default("d", 9) == "d"

    def test_clone_args_is_independent(self, helpers: CommandHelpers) -> None:
        clone = helpers.clone_args()
        clone.append("third")
        assert helpers.clone_args() == ["first", "second"]

    def test_captured_values_are_copies(self) -> None:
        args = ["a"]
        flags: dict[str, Any] = {"f": 1}
        helpers = CommandHelpers(args, flags)
        args.append("b")
        flags["g"] = 2
        assert helpers.clone_args() == ["a"]
        assert not helpers.has_flag("g")

    def test_require_args(self, helpers: CommandHelpers) -> None:
        assert helpers.require_args("source", "target") == {"source": "first", "target": "second"}

    def test_require_args_missing(self, helpers: CommandHelpers) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            helpers.require_args("source", "target", "mode")
        assert exc_info.value.argument_name == "mode"
        assert str(exc_info.value) == "Missing required <mode> argument"
        assert exc_info.value.exit_code == 2

    def test_value_or_default(self) -> None:
        assert CommandHelpers.value_or_default(None, 3) == 3
        assert CommandHelpers.value_or_default(0, 3) == 0
        assert CommandHelpers.value_or_default(False, True) is False

    def test_no_output(self, helpers: CommandHelpers) -> None:
        assert helpers.no_output() is NO_OUTPUT


# ------------------------------------------------------------------ #
# Streams
# ------------------------------------------------------------------ #


class TestStreams:
    def test_stream_accessors(self) -> None:
        stdio = _stdio()
        helpers = CommandHelpers([], {}, stdio)
        assert helpers.get_stdin() is stdio.stdin
        assert helpers.get_stdout() is stdio.stdout
        assert helpers.get_stderr() is stdio.stderr

    def test_read_json_from_stdin(self) -> None:
        helpers = CommandHelpers([], {}, _stdio('{"a": [1, 2]}'))
        assert helpers.read_json_from_stdin() == {"a": [1, 2]}

    def test_read_invalid_json(self) -> None:
        helpers = CommandHelpers([], {}, _stdio("{not json"))
        with pytest.raises(InvalidUsageError, match="Invalid JSON on stdin"):
            helpers.read_json_from_stdin()

    def test_write_json_to_stdout(self) -> None:
        stdio = _stdio()
        CommandHelpers([], {}, stdio).write_json_to_stdout({"name": "café"})
        text = stdio.stdout.getvalue()
        assert text.endswith("\n")
        assert "café" in text
        assert json.loads(text) == {"name": "café"}

    def test_write_json_to_stderr_compact(self) -> None:
        stdio = _stdio()
        CommandHelpers([], {}, stdio).write_json_to_stderr([1, 2], indent=None)
        assert stdio.stderr.getvalue() == "[1, 2]\n"
        assert stdio.stdout.getvalue() == ""


# ------------------------------------------------------------------ #
# Context
# ------------------------------------------------------------------ #


class TestContext:
    def _context(self) -> CommandContext:
        return CommandContext(
            app_name="test-app",
            helpers=CommandHelpers(["a"], {}),
            logger=Logger("test-app", colorful=False),
            command_chain=("echo",),
        )

    def test_outside_a_command(self) -> None:
        with pytest.raises(RuntimeError, match="outside of a running command"):
            get_context()

    def test_bind_context(self) -> None:
        ctx = self._context()
        with bind_context(ctx):
            assert get_context() is ctx
        with pytest.raises(RuntimeError):
            get_context()

    def test_nested_binding_restores_outer(self) -> None:
        outer, inner = self._context(), self._context()
        with bind_context(outer):
            with bind_context(inner):
                assert get_context() is inner
            assert get_context() is outer

    def test_no_output_property(self) -> None:
        assert self._context().NO_OUTPUT is NO_OUTPUT

    def test_defaults(self) -> None:
        ctx = self._context()
        assert ctx.extensions == {}
        assert ctx.app_context == {}
