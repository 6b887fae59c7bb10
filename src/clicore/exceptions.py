"""Exception hierarchy for clicore.

All exceptions inherit from :class:`CliCoreError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clicore.exit_codes`.
In normal mode :class:`~clicore.core.CliCore` logs the error and records its
``exit_code``; in debug mode it re-raises it to the caller.

Errors fall in three groups:

* **Configuration errors** -- :class:`ConfigError` and
  :class:`ExtensionError`. Raised synchronously while a
  :class:`~clicore.core.CliCore` is being built, before any command runs.
* **Routing errors** -- :class:`CommandNotFoundError`. Returned as a value
  by :meth:`~clicore.router.Router.navigate`, never raised by the router.
* **Command errors** -- anything raised by a command. Non-exception values
  are wrapped in :class:`CommandError`.

Subclass hierarchy::

    CliCoreError (exit 1)
    +-- InvalidUsageError       (exit 2)
    |   +-- MissingArgumentError
    +-- ConfigError             (exit 3)
    |   +-- ExtensionError      (exit 10)
    +-- CommandNotFoundError    (exit 4)
    +-- CommandError            (exit 1)
"""

from __future__ import annotations

from typing import Any

from clicore.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_EXTENSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class CliCoreError(Exception):
    """Base exception for all clicore errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CliCoreError):
    """Raised by commands for invalid arguments or flags."""

    exit_code = EXIT_INVALID_USAGE


class MissingArgumentError(InvalidUsageError):
    """Raised by :meth:`~clicore.helpers.CommandHelpers.require_args`.

    Attributes:
        argument_name: The name of the first missing positional argument.
    """

    def __init__(self, argument_name: str):
        super().__init__(f"Missing required <{argument_name}> argument")
        self.argument_name = argument_name


class ConfigError(CliCoreError):
    """Raised for invalid options, command trees or help trees."""

    exit_code = EXIT_CONFIG_ERROR


class ExtensionError(ConfigError):
    """Raised when an extension is invalid, duplicated, or fails to load."""

    exit_code = EXIT_EXTENSION_ERROR


class CommandNotFoundError(CliCoreError):
    """Describes a command chain that does not exist in the command tree.

    Attributes:
        command_chain: Every token consumed by the router, including the
            unmatched one.
    """

    exit_code = EXIT_NOT_FOUND

    def __init__(self, app_name: str, command_chain: tuple[str, ...]):
        message = f'Command "{" ".join((app_name, *command_chain))}" not found'
        if len(command_chain) > 1:
            message += f': no such branch "{command_chain[-1]}"'
        super().__init__(message)
        self.command_chain = command_chain

    @property
    def invalid_branch(self) -> str | None:
        """The last, unmatched segment of the chain."""
        return self.command_chain[-1] if self.command_chain else None


class CommandError(CliCoreError):
    """Wraps a non-exception value raised or reported by a command.

    The text of the original value is kept as the error message.

    Attributes:
        value: The original value.
    """

    def __init__(self, value: Any):
        super().__init__(str(value))
        self.value = value


def normalize_error(value: Any) -> BaseException:
    """Return *value* if it is an exception, otherwise wrap it in :class:`CommandError`."""
    if isinstance(value, BaseException):
        return value
    return CommandError(value)
