"""Split raw invocation tokens into positional arguments and flags.

The tokenizer is a two-state scanner:

* ``ARGUMENT`` -- the next plain token is a positional argument.
* ``AWAITING_VALUE`` -- the previous token was a flag marker, so the next
  plain token is that flag's value.

A flag marker is a token starting with one of the configured prefixes.
Prefixes are tried longest first, so with ``["-", "--"]`` the token ``--x``
is the flag ``x`` and never the flag ``-x``. A flag followed by another
marker, or by the end of input, keeps the value ``None``.

Example::

    >>> Parser(FlagOptions()).parse(["deploy", "--env", "prod", "-f"])
    ParsedArguments(args=['deploy'], flags={'env': 'prod', 'f': None})
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Optional

from clicore.models import Argument, FlagOptions, Flags, ParsedArguments

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")

_LITERALS: dict[str, Argument] = {
    "true": True,
    "false": False,
    "null": None,
}


def infer_type(token: str) -> Argument:
    """Convert *token* to a bool, int, float or ``None`` when it spells one.

    ``"undefined"``, every other non-literal and numbers Python cannot
    convert (such as integers past the digit limit) stay strings.
    """
    if token in _LITERALS:
        return _LITERALS[token]
    try:
        if _INTEGER_RE.match(token):
            return int(token)
        if _NUMBER_RE.match(token):
            return float(token)
    except ValueError:
        logger.debug("Keeping unconvertible number as text (%d characters)", len(token))
    return token


class ScanState(enum.Enum):
    """State of the tokenizer between two tokens."""

    ARGUMENT = "argument"
    AWAITING_VALUE = "awaiting_value"


class Parser:
    """Tokenizer configured by a :class:`~clicore.models.FlagOptions`.

    The parser holds no per-invocation state; :meth:`parse` may be called
    any number of times.
    """

    def __init__(self, options: FlagOptions) -> None:
        self._options = options
        self._prefixes = options.active_prefixes

    @property
    def prefixes(self) -> list[str]:
        """The prefixes in matching order (longest first)."""
        return list(self._prefixes)

    def format_value(self, token: str) -> Argument:
        """Return the flag value for *token*, honouring ``infer_types``."""
        if self._options.infer_types:
            return infer_type(token)
        return token

    def match_flag(self, token: str) -> Optional[str]:
        """Return the flag name carried by *token*, or ``None`` if it is not a flag."""
        for prefix in self._prefixes:
            if token.startswith(prefix):
                name = token[len(prefix):]
                if not name and not self._options.parse_empty_flags:
                    return None
                return name
        return None

    def parse(self, raw_args: list[str]) -> ParsedArguments:
        """Split *raw_args* into positional arguments and flags.

        Args:
            raw_args: Invocation tokens with the program name already removed.

        Returns:
            A :class:`~clicore.models.ParsedArguments`. Positional arguments
            are never type-inferred; flag values are when ``infer_types`` is
            enabled.
        """
        if not self._options.parse or not self._prefixes:
            return ParsedArguments(args=list(raw_args), flags={})

        args: list[Argument] = []
        flags: Flags = {}
        explicit_nulls: set[str] = set()

        state = ScanState.ARGUMENT
        pending: Optional[str] = None

        for token in raw_args:
            name = self.match_flag(token)

            if name is not None:
                flags[name] = None
                explicit_nulls.discard(name)
                pending = name
                state = ScanState.AWAITING_VALUE
                continue

            if state is ScanState.AWAITING_VALUE and pending is not None:
                value = self.format_value(token)
                flags[pending] = value
                if value is None:
                    explicit_nulls.add(pending)
                pending = None
                state = ScanState.ARGUMENT
                continue

            args.append(token)

        if self._options.ignore_empty_flags:
            empty = [
                name
                for name, value in flags.items()
                if value is None and name not in explicit_nulls
            ]
            for name in empty:
                del flags[name]
            if empty:
                logger.debug("Dropped flags without values: %s", ", ".join(empty))

        return ParsedArguments(args=args, flags=flags)
