"""Output formatting with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only: the text returned by a command, help
  output and JSON written with :meth:`Logger.json`.
* **stderr** -- all diagnostics (debug, info, warnings, errors).
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and the
  ``colorful_output`` behaviour option.

In debug mode every diagnostic carries a prefix with the timestamp, the
level and the origin of the message, e.g.::

    2026-10-18T09:12:44.120+00:00 INFO  [mytool::Extensions::audit.interceptors] starting

Each :class:`~clicore.core.CliCore` owns its own :class:`Logger`; extensions
receive children of it via :meth:`Logger.child`, so two applications in the
same process never share output state.
"""

from __future__ import annotations

import json
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import IO, Any, Optional, Union

from rich.console import Console
from rich.markup import escape

_LEVEL_STYLES = {
    "debug": "black on grey50",
    "info": "bright_blue",
    "warn": "bright_yellow",
    "error": "bright_red",
    "data": "black on bright_white",
}


class LogFormatter:
    """String formatters used by :class:`Logger`.

    Every method returns Rich markup; user text is escaped so brackets in a
    message are printed as-is.
    """

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def debug(self, message: str) -> str:
        return self._logger._prefix("debug") + escape(message)

    def info(self, message: str) -> str:
        return self._logger._prefix("info") + escape(message)

    def warning(self, message: str) -> str:
        return self._logger._prefix("warn") + escape(message)

    def error(self, error: Union[BaseException, str]) -> str:
        message = str(error)
        if self._logger.debug_mode and isinstance(error, BaseException):
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            message = f"{message}\n{trace.rstrip()}"
        if not self._logger.debug_mode:
            return f"[bold red]Error:[/bold red] {escape(message)}"
        return self._logger._prefix("error") + escape(message)

    def json(self, data: Any) -> str:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except (json.JSONDecodeError, TypeError):
                pass
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        prefix = self._logger._prefix("data")
        return f"{prefix}\n{escape(text)}" if prefix else escape(text)


class Logger:
    """Rich-backed logger bound to one origin.

    Args:
        origin: Name shown in debug-mode prefixes, e.g. the application name.
        debug_mode: Enable debug messages, prefixes and tracebacks.
        colorful: Allow colour; still disabled by ``NO_COLOR``/``TERM=dumb``.
        stdout: Data stream; ``sys.stdout`` at write time when omitted.
        stderr: Diagnostics stream; ``sys.stderr`` at write time when omitted.
    """

    def __init__(
        self,
        origin: str,
        debug_mode: bool = False,
        colorful: bool = True,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        self.origin = origin
        self.debug_mode = debug_mode
        self.colorful = colorful and not _should_disable_color()
        self._stdout = stdout
        self._stderr = stderr
        self.format = LogFormatter(self)

    def child(self, origin: str) -> Logger:
        """Return a logger with the same settings and streams but another *origin*."""
        return Logger(
            origin,
            debug_mode=self.debug_mode,
            colorful=self.colorful,
            stdout=self._stdout,
            stderr=self._stderr,
        )

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def data(self, text: str) -> None:
        """Write command output to stdout exactly as given, plus a newline."""
        stream = self._stdout or sys.stdout
        print(text, file=stream, flush=True)

    def json(self, data: Any) -> None:
        """Pretty-print *data* (or a JSON string) to stdout."""
        self._console(self._stdout or sys.stdout).print(self.format.json(data))

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def debug(self, message: str) -> None:
        """Print a debug message. Only shown in debug mode."""
        if self.debug_mode:
            self._diagnostic(self.format.debug(message))

    def info(self, message: str) -> None:
        self._diagnostic(self.format.info(message))

    def warning(self, message: str) -> None:
        if not self.debug_mode:
            self._diagnostic(f"[yellow]Warning:[/yellow] {escape(message)}")
        else:
            self._diagnostic(self.format.warning(message))

    def error(self, error: Union[BaseException, str]) -> None:
        """Print an error message; in debug mode the traceback follows it."""
        self._diagnostic(self.format.error(error))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _prefix(self, level: str) -> str:
        if not self.debug_mode:
            return ""
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        tag = level.upper().ljust(5)
        style = _LEVEL_STYLES[level]
        return (
            f"[green]{timestamp}[/green] [{style}]{tag}[/{style}] "
            f"[bold bright_white]{escape('[' + self.origin + ']')}[/bold bright_white] "
        )

    def _diagnostic(self, markup: str) -> None:
        self._console(self._stderr or sys.stderr).print(markup)

    def _console(self, stream: IO[str]) -> Console:
        return Console(
            file=stream,
            color_system="auto" if self.colorful else None,
            highlight=False,
            soft_wrap=True,
        )


def _should_disable_color() -> bool:
    """Check if colour should be disabled per clig.dev.

    Returns True when the NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False
