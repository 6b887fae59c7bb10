"""clicore -- a reusable engine for command-line applications.

An application declares a tree of commands (plain callables grouped in
nested mappings) and hands clicore the raw invocation tokens. clicore then:

1. splits the tokens into positional arguments and flags
   (:mod:`clicore.parser`);
2. walks the command tree to the command to run and its arguments
   (:mod:`clicore.router`);
3. shows help instead when a help flag is present or the route ends at a
   group (:mod:`clicore.descriptor`);
4. lets extensions observe and rewrite the data between those steps
   (:mod:`clicore.extensions`).

Typical usage::

    from clicore import CliCore

    app = CliCore({
        "app_name": "mytool",
        "commands": {"hello": lambda args, flags: "Hello!"},
        "help": {"hello": "Say hello"},
    })
    app.main()

Modules:
    core: The invocation pipeline (:class:`CliCore`).
    models: Options and pipeline values shared across the package.
    config: Option defaults and environment overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: Rich-backed logger with stdout/stderr discipline.
"""

__version__ = "0.1.0"

from clicore.commands import Command, CommandGroup, build_command_tree, command  # noqa: E402
from clicore.context import CommandContext, get_context  # noqa: E402
from clicore.core import CliCore  # noqa: E402
from clicore.exceptions import (  # noqa: E402
    CliCoreError,
    CommandError,
    CommandNotFoundError,
    ConfigError,
    ExtensionError,
    InvalidUsageError,
    MissingArgumentError,
)
from clicore.extensions import Extension, FunctionExtension  # noqa: E402
from clicore.models import (  # noqa: E402
    NO_OUTPUT,
    CliCoreOptions,
    ParsedArguments,
    RoutingResult,
    RoutingStatus,
    Stdio,
)

__all__ = [
    "NO_OUTPUT",
    "CliCore",
    "CliCoreError",
    "CliCoreOptions",
    "Command",
    "CommandContext",
    "CommandError",
    "CommandGroup",
    "CommandNotFoundError",
    "ConfigError",
    "Extension",
    "ExtensionError",
    "FunctionExtension",
    "InvalidUsageError",
    "MissingArgumentError",
    "ParsedArguments",
    "RoutingResult",
    "RoutingStatus",
    "Stdio",
    "build_command_tree",
    "command",
    "get_context",
]
