"""Read-only accessors over one invocation's arguments, flags and streams.

A :class:`CommandHelpers` is built fresh for every command call and is
reachable from the command through :func:`clicore.get_context`::

    def greet(args, flags):
        helpers = get_context().helpers
        values = helpers.require_args("name")
        shout = helpers.has_flag("shout", "s")
        text = f"Hello, {values['name']}!"
        return text.upper() if shout else text

All lookups are pure functions of the captured values; nothing here mutates
the arguments or flags the command received.
"""

from __future__ import annotations

import copy
import json
from typing import IO, Any, Optional, TypeVar

from clicore.exceptions import InvalidUsageError, MissingArgumentError
from clicore.models import NO_OUTPUT, Argument, Flags, NoOutput, Stdio

T = TypeVar("T")


class CommandHelpers:
    """Helpers for one command call.

    Args:
        args: The command's own arguments (after the command chain).
        flags: All parsed flags.
        stdio: The streams handed to the command.
    """

    def __init__(self, args: list[Argument], flags: Flags, stdio: Optional[Stdio] = None) -> None:
        self._args = list(args)
        self._flags = dict(flags)
        self._stdio = stdio or Stdio()

    # ------------------------------------------------------------------ #
    # Flags
    # ------------------------------------------------------------------ #

    def which_flag(self, name: str, *aliases: str) -> Optional[str]:
        """Return the first of *name* and *aliases* that was passed, or ``None``."""
        for candidate in (name, *aliases):
            if candidate in self._flags:
                return candidate
        return None

    def has_flag(self, name: str, *aliases: str) -> bool:
        return self.which_flag(name, *aliases) is not None

    def get_flag(self, name: str, *aliases: str) -> Argument:
        """Return the value of the first alias that was passed.

        ``None`` is returned both when no alias was passed and when the flag
        was passed without a value; use :meth:`has_flag` to tell them apart.
        """
        key = self.which_flag(name, *aliases)
        if key is None:
            return None
        return self._flags[key]

    def get_flag_or_default(self, default: T, name: str, *aliases: str) -> Any:
        return self.value_or_default(self.get_flag(name, *aliases), default)

    # ------------------------------------------------------------------ #
    # Arguments
    # ------------------------------------------------------------------ #

    def has_arg_at(self, index: int) -> bool:
        return 0 <= index < len(self._args)

    def get_arg_at(self, index: int) -> Argument:
        """Return the argument at *index*, or ``None`` when out of range.

        Negative indexes are out of range.
        """
        if not self.has_arg_at(index):
            return None
        return self._args[index]

    def get_arg_or_default(self, default: T, index: int) -> Any:
        return self.value_or_default(self.get_arg_at(index), default)

    def clone_args(self) -> list[Argument]:
        return copy.deepcopy(self._args)

    def require_args(self, *names: str) -> dict[str, Argument]:
        """Map *names* to the leading positional arguments.

        Raises:
            MissingArgumentError: Naming the first argument that is missing.
        """
        values: dict[str, Argument] = {}
        for index, name in enumerate(names):
            value = self.get_arg_at(index)
            if value is None:
                raise MissingArgumentError(name)
            values[name] = value
        return values

    @staticmethod
    def value_or_default(value: Optional[T], default: T) -> T:
        """Return *default* when *value* is ``None``."""
        if value is None:
            return default
        return value

    # ------------------------------------------------------------------ #
    # Streams
    # ------------------------------------------------------------------ #

    def get_stdin(self) -> IO[str]:
        return self._stdio.stdin

    def get_stdout(self) -> IO[str]:
        return self._stdio.stdout

    def get_stderr(self) -> IO[str]:
        return self._stdio.stderr

    def read_json_from_stdin(self) -> Any:
        """Read stdin until end of input and decode it as JSON.

        Raises:
            InvalidUsageError: If the input is not valid JSON.
        """
        raw = self._stdio.stdin.read()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidUsageError(f"Invalid JSON on stdin: {exc}") from exc

    def write_json_to_stdout(self, data: Any, indent: Optional[int] = 2) -> None:
        _write_json(self._stdio.stdout, data, indent)

    def write_json_to_stderr(self, data: Any, indent: Optional[int] = 2) -> None:
        _write_json(self._stdio.stderr, data, indent)

    @staticmethod
    def no_output() -> NoOutput:
        """Return :data:`~clicore.models.NO_OUTPUT`, for commands that print on their own."""
        return NO_OUTPUT


def _write_json(stream: IO[str], data: Any, indent: Optional[int]) -> None:
    stream.write(json.dumps(data, indent=indent, ensure_ascii=False, default=str))
    stream.write("\n")
    stream.flush()
