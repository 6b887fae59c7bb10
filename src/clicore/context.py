"""Per-invocation execution context handed to running commands.

Commands keep the plain ``(args, flags)`` signature; everything else they may
need (helpers, extension addons, the logger, streams) is reached through
:func:`get_context`, which is only valid while a command is running::

    from clicore import get_context

    def status(args, flags):
        ctx = get_context()
        ctx.logger.debug("checking status")
        return ctx.extensions["store"]["read"]("status")

The context lives in a :class:`contextvars.ContextVar`, so nested or
concurrent invocations (each with its own :class:`~clicore.core.CliCore`)
see their own values.
"""

from __future__ import annotations

import contextlib
import contextvars
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from clicore.helpers import CommandHelpers
from clicore.models import NO_OUTPUT, NoOutput, Stdio
from clicore.output import Logger


@dataclass(frozen=True)
class CommandContext:
    """Everything a command may use besides its arguments and flags.

    Attributes:
        app_name: Name of the running application.
        command_chain: Names of the command groups and command that were run.
        helpers: Accessors over this call's arguments, flags and streams.
        extensions: Addons bundled from extensions, keyed by extension name.
        logger: Logger whose origin is the command chain.
        stdio: Streams handed to the command.
        app_context: The ``context`` values from the application options.
    """

    app_name: str
    helpers: CommandHelpers
    logger: Logger
    command_chain: tuple[str, ...] = ()
    extensions: dict[str, dict[str, Any]] = field(default_factory=dict)
    stdio: Stdio = field(default_factory=Stdio)
    app_context: dict[str, Any] = field(default_factory=dict)

    @property
    def NO_OUTPUT(self) -> NoOutput:  # noqa: N802
        return NO_OUTPUT


_current: contextvars.ContextVar[CommandContext] = contextvars.ContextVar("clicore_context")


def get_context() -> CommandContext:
    """Return the context of the command currently running.

    Raises:
        RuntimeError: If no command is running.
    """
    try:
        return _current.get()
    except LookupError:
        raise RuntimeError("get_context() called outside of a running command") from None


@contextlib.contextmanager
def bind_context(ctx: CommandContext) -> Iterator[CommandContext]:
    """Make *ctx* the current context for the duration of the block."""
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)
