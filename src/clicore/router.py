"""Resolve positional arguments to a command in the command tree.

Routing is a single-path descent from the root:

1. Before descending, note whether any help flag is present. This does not
   stop the descent; it only turns a resolved command into a help request.
2. For each argument: stop at a :class:`~clicore.commands.Command` (the
   remaining arguments become the command's arguments), otherwise push the
   argument onto the chain and step into the matching child. A missing
   child stops with an error.
3. Running out of arguments at a :class:`~clicore.commands.CommandGroup`
   is a help request: there is nothing to run, so the group's subcommands
   are shown instead.

Errors are returned inside the :class:`~clicore.models.RoutingResult`, never
raised, so the pipeline decides whether to log or re-raise them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from clicore.commands import Command, CommandNode
from clicore.exceptions import CommandNotFoundError
from clicore.models import Argument, Flags, RoutingResult, RoutingStatus

logger = logging.getLogger(__name__)


class NavigationDetails:
    """Accumulates the state of one descent and freezes it into a result.

    Setters are only allowed while the details are open; :meth:`close`
    seals them. Each call to :meth:`Router.navigate` uses a fresh instance.
    """

    def __init__(self) -> None:
        self.command_chain: list[str] = []
        self.is_help = False
        self.error: Optional[CommandNotFoundError] = None
        self.command: Optional[Command] = None
        self._open = True

    def _require_open(self) -> None:
        if not self._open:
            raise RuntimeError("Navigation details are closed")

    def request_help(self) -> None:
        self._require_open()
        self.is_help = True

    def add_command(self, name: str) -> None:
        self._require_open()
        self.command_chain.append(name)

    def fail(self, error: CommandNotFoundError) -> None:
        self._require_open()
        self.error = error
        self._open = False

    def resolve(self, command: Command) -> None:
        self._require_open()
        self.command = command
        self._open = False

    def close(self) -> None:
        self._open = False

    def to_result(self, command_args: Sequence[Argument] = ()) -> RoutingResult:
        chain = tuple(self.command_chain)
        if self.error is not None:
            return RoutingResult(RoutingStatus.ERROR, chain, (), self.error)
        if self.command is None or self.is_help:
            return RoutingResult(RoutingStatus.HELP, chain, tuple(command_args), self.command)
        return RoutingResult(RoutingStatus.CALLBACK, chain, tuple(command_args), self.command)


class Router:
    """Walks a command tree for one application.

    Args:
        app_name: Used in "not found" messages.
        commands: Root of the tree, as returned by
            :func:`~clicore.commands.build_command_tree`.
        help_flags: Flag names that request help.
    """

    def __init__(
        self,
        app_name: str,
        commands: CommandNode,
        help_flags: Iterable[str] = ("h", "help", "?"),
    ) -> None:
        self._app_name = app_name
        self._commands = commands
        self._help_flags = tuple(help_flags)

    @property
    def commands(self) -> CommandNode:
        return self._commands

    def navigate(self, args: Sequence[Argument], flags: Flags) -> RoutingResult:
        """Resolve *args* against the command tree.

        Args:
            args: Positional arguments from the parser.
            flags: Parsed flags; only the presence of help flags matters here.

        Returns:
            A fresh :class:`~clicore.models.RoutingResult`.
        """
        details = NavigationDetails()

        if any(name in flags for name in self._help_flags):
            details.request_help()

        node: Optional[CommandNode] = self._commands

        for index, arg in enumerate(args):
            if isinstance(node, Command):
                details.resolve(node)
                return details.to_result(args[index:])

            key = str(arg)
            details.add_command(key)
            node = node.get(key)

            if node is None:
                error = CommandNotFoundError(self._app_name, tuple(details.command_chain))
                logger.debug("Routing failed: %s", error)
                details.fail(error)
                return details.to_result()

        if isinstance(node, Command):
            details.resolve(node)
        else:
            details.close()
        return details.to_result()
