"""The invocation pipeline.

:class:`CliCore` ties the parser, the router, the help descriptor and the
extensions together. One call to :meth:`CliCore.run_async` processes one
invocation in fixed stages, each completed before the next starts::

    raw tokens -> before_parsing -> parse -> before_routing -> navigate
        -> before_running -> run command | render help -> before_printing
        -> output -> before_ending

Errors (an unmatched route, an exception raised by a command, a failing
interceptor) go to a single policy point: they are passed through the
``before_error`` interceptors, then re-raised in debug mode, or logged to
stderr with :attr:`CliCore.exit_code` set in normal mode. ``before_ending``
interceptors run in both cases; when one of them fails after an earlier
error, the failure is only logged and the earlier error wins.

Configuration problems (invalid options, command tree, help tree or
extensions) raise while the :class:`CliCore` is constructed.

Example::

    from clicore import CliCore, get_context

    def greet(args, flags):
        name = get_context().helpers.get_arg_or_default("world", 0)
        return f"Hello, {name}!"

    app = CliCore({"app_name": "greeter", "commands": {"greet": greet}})

    if __name__ == "__main__":
        app.main()
"""

from __future__ import annotations

import asyncio
import inspect
import sys
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from clicore.commands import Command, CommandGroup, CommandNode, build_command_tree
from clicore.config import resolve_options
from clicore.context import CommandContext, bind_context
from clicore.descriptor import Descriptor
from clicore.exceptions import ConfigError, normalize_error
from clicore.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS
from clicore.extensions.bundler import ExtensionBundler
from clicore.extensions.interceptors import InterceptorRunner
from clicore.helpers import CommandHelpers
from clicore.models import (
    NO_OUTPUT,
    CliCoreOptions,
    Flags,
    NoOutput,
    Output,
    ParsedArguments,
    RoutingResult,
    RoutingStatus,
    Stdio,
)
from clicore.output import Logger
from clicore.parser import Parser
from clicore.router import Router


class CliCore:
    """A command-line application.

    Args:
        options: A :class:`~clicore.models.CliCoreOptions` or a (partial)
            mapping of options; see :func:`~clicore.config.resolve_options`.

    Raises:
        ConfigError: If the options, the command tree or the help tree are
            invalid.
        ExtensionError: If an extension is invalid or two share a name.
    """

    def __init__(self, options: Union[CliCoreOptions, Mapping[str, Any], None] = None) -> None:
        self.options = resolve_options(options)
        behavior = self.options.behavior
        flag_options = self.options.arguments.flags

        self.logger = Logger(
            self.options.app_name,
            debug_mode=behavior.debug_mode,
            colorful=behavior.colorful_output,
        )
        self._commands = build_command_tree(self.options.commands)
        self._parser = Parser(flag_options)
        self._help_tree = self.options.help
        self._descriptor = self._build_descriptor(self._help_tree)

        bundler = ExtensionBundler(self.options, self.logger)
        self._interceptors = bundler.get_interceptors()
        self._addons = bundler.bundle()

        self.exit_code = EXIT_SUCCESS

    @property
    def app_name(self) -> str:
        return self.options.app_name

    @property
    def commands(self) -> CommandNode:
        """Root of the command tree."""
        return self._commands

    # ------------------------------------------------------------------ #
    # Command and help accessors
    # ------------------------------------------------------------------ #

    def get_command(self, name: str) -> Optional[CommandNode]:
        """Return the top-level command or group *name*, or ``None``."""
        if isinstance(self._commands, Command):
            return None
        return self._commands.get(name)

    def set_command(self, name: str, node: Any) -> None:
        """Add or replace a top-level command or group.

        *node* may be anything :func:`~clicore.commands.build_command_tree`
        accepts.

        Raises:
            ConfigError: If the application is a single command.
        """
        self._require_group().set(name, build_command_tree(node))

    def remove_command(self, name: str) -> Optional[CommandNode]:
        """Remove a top-level command or group and return it, or ``None``."""
        return self._require_group().remove(name)

    def get_help(self) -> Any:
        return self._help_tree

    def set_help(self, help_tree: Any) -> None:
        """Replace the help tree.

        Raises:
            ConfigError: If the new tree is invalid; the old one is kept.
        """
        self._descriptor = self._build_descriptor(help_tree)
        self._help_tree = help_tree

    def render_help(self, command_chain: Sequence[str] = ()) -> str:
        return self._descriptor.render(command_chain)

    # ------------------------------------------------------------------ #
    # Running
    # ------------------------------------------------------------------ #

    def run(self, argv: Optional[Sequence[str]] = None, stdio: Optional[Stdio] = None) -> Optional[str]:
        """Synchronous wrapper around :meth:`run_async`.

        Must not be called from a running event loop.
        """
        return asyncio.run(self.run_async(argv, stdio))

    async def run_async(
        self, argv: Optional[Sequence[str]] = None, stdio: Optional[Stdio] = None
    ) -> Optional[str]:
        """Process one invocation.

        Args:
            argv: Raw tokens; ``options.arguments.origin`` when omitted. The
                first ``options.arguments.ignore_first`` tokens are dropped
                either way.
            stdio: Streams handed to the command; the process streams when
                omitted.

        Returns:
            In debug mode, the final output text, or ``None`` when the command
            returned :data:`~clicore.models.NO_OUTPUT`. In normal mode the
            output is printed and ``None`` is returned.

        Raises:
            Exception: In debug mode, the error that stopped the invocation.
        """
        self.exit_code = EXIT_SUCCESS
        stdio = stdio or Stdio()
        runner = InterceptorRunner(self._interceptors, self.options, self.logger)
        origin = self.options.arguments.origin if argv is None else argv
        raw_args = list(origin)[self.options.arguments.ignore_first:]

        failed = True
        try:
            output = await self._process(runner, raw_args, stdio)
            result = await self._emit(output)
            failed = False
            return result
        except Exception as exc:
            await self._fail(runner, exc)
            return None
        finally:
            await self._end(runner, failed)

    def main(self, argv: Optional[Sequence[str]] = None) -> None:
        """Run the application and exit the process with :attr:`exit_code`.

        Raises:
            SystemExit: Always.
        """
        try:
            self.run(argv)
        except KeyboardInterrupt:
            sys.stderr.write("\nCancelled.\n")
            sys.exit(130)
        sys.exit(self.exit_code)

    # ------------------------------------------------------------------ #
    # Pipeline stages
    # ------------------------------------------------------------------ #

    async def _process(self, runner: InterceptorRunner, raw_args: list[str], stdio: Stdio) -> Output:
        raw_args = await runner.run("before_parsing", raw_args)
        self.logger.debug(f"Raw arguments: {raw_args!r}")

        parsed: ParsedArguments = await runner.run("before_routing", self._parser.parse(raw_args))
        self.logger.debug(f"Parsed arguments: {parsed.args!r}, flags: {parsed.flags!r}")

        router = Router(self.app_name, self._commands, self.options.arguments.flags.help_flags)
        routing: RoutingResult = await runner.run(
            "before_running", router.navigate(parsed.args, parsed.flags)
        )
        status = RoutingStatus(routing.status)
        self.logger.debug(
            f"Routing: {status.value} {' '.join(routing.command_chain) or '<root>'}"
        )

        if status is RoutingStatus.ERROR:
            raise normalize_error(routing.result)

        if status is RoutingStatus.HELP:
            output: Output = self._descriptor.render(routing.command_chain)
        else:
            output = await self._invoke(routing, parsed.flags, stdio)

        return await runner.run("before_printing", output)

    async def _invoke(self, routing: RoutingResult, flags: Flags, stdio: Stdio) -> Output:
        command = routing.result
        if not isinstance(command, Command):
            if not callable(command):
                raise ConfigError(
                    f"Route \"{' '.join(routing.command_chain)}\" has no command to run"
                )
            command = Command(command)

        args = list(routing.command_args)
        chain = routing.command_chain
        ctx = CommandContext(
            app_name=self.app_name,
            helpers=CommandHelpers(args, flags, stdio),
            logger=self.logger.child(" ".join((self.app_name, *chain))),
            command_chain=chain,
            extensions=self._addons,
            stdio=stdio,
            app_context=self.options.context,
        )

        with bind_context(ctx):
            result = command(args, dict(flags))
            if inspect.isawaitable(result):
                result = await result

        if result is None or isinstance(result, NoOutput):
            return NO_OUTPUT
        return result if isinstance(result, str) else str(result)

    async def _emit(self, output: Output) -> Optional[str]:
        if isinstance(output, NoOutput):
            return None
        if self.options.behavior.debug_mode:
            return output

        sink = self.options.behavior.logger
        if sink is None:
            self.logger.data(output)
        else:
            result = sink(output)
            if inspect.isawaitable(result):
                await result
        return None

    async def _fail(self, runner: InterceptorRunner, exc: Exception) -> None:
        error = normalize_error(await runner.run("before_error", exc))
        self.exit_code = getattr(error, "exit_code", EXIT_GENERIC_FAILURE)

        if self.options.behavior.debug_mode:
            if error is exc:
                raise exc
            raise error from exc

        self.logger.error(error)

    async def _end(self, runner: InterceptorRunner, failed: bool) -> None:
        try:
            await runner.run_ending()
        except Exception as exc:
            if not failed:
                await self._fail(runner, exc)
                return
            # The earlier error keeps its exit code and keeps propagating.
            self.logger.error(normalize_error(exc))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _build_descriptor(self, help_tree: Any) -> Descriptor:
        return Descriptor(
            self.app_name,
            self.options.app_description,
            self.options.arguments.flags,
            help_tree,
        )

    def _require_group(self) -> CommandGroup:
        if not isinstance(self._commands, CommandGroup):
            raise ConfigError("Single-command applications have no subcommands to change")
        return self._commands
