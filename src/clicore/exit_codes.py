"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~clicore.exceptions.CliCoreError` subclass. When an
application runs in normal (non-debug) mode, :meth:`clicore.core.CliCore.main`
exits with the code of the error that stopped the invocation, so shell
wrappers can tell failure classes apart without parsing stderr.

Example::

    $ mytool deploy nowhere
    Error: Command "mytool deploy nowhere" not found: no such branch "nowhere"
    $ echo $?
    4   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including errors raised by commands."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or missing arguments."""

EXIT_CONFIG_ERROR = 3
"""The application was configured incorrectly (options, command tree, help tree)."""

EXIT_NOT_FOUND = 4
"""No command matched the given command chain."""

EXIT_EXTENSION_ERROR = 10
"""An extension failed validation or could not be loaded."""
