"""Canonical data shapes shared across all clicore modules.

The models fall into two groups:

**Configuration models** -- Pydantic v2 models describing one application:
    :class:`FlagOptions`, :class:`ArgumentOptions`, :class:`BehaviorOptions`
    and :class:`CliCoreOptions`. Nested sections are filled with defaults, so
    a caller only supplies the keys it wants to change.

**Pipeline values** -- immutable values produced and consumed while one
invocation flows through the pipeline:
    :class:`ParsedArguments`, :class:`RoutingStatus`, :class:`RoutingResult`,
    :class:`Stdio` and the :data:`NO_OUTPUT` marker.
"""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING, Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from clicore.commands import Command


Argument = Union[str, int, float, bool, None]
"""A positional argument or flag value, after optional type inference."""

Flags = dict[str, Argument]
"""Flag names mapped to their values; ``None`` means "no value supplied"."""


# --- No-output marker ---


class NoOutput:
    """Result of a command that intentionally prints nothing.

    There is a single instance, :data:`NO_OUTPUT`. It is falsy and distinct
    from both ``""`` (print an empty line) and an error.
    """

    _instance: Optional[NoOutput] = None

    def __new__(cls) -> NoOutput:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_OUTPUT"


NO_OUTPUT = NoOutput()

Output = Union[str, NoOutput]
"""What a command produces: printable text or :data:`NO_OUTPUT`."""


# --- Configuration ---


class FlagOptions(BaseModel):
    """How flags are recognised in the token stream.

    Example::

        FlagOptions(prefixes=["--", "-"], infer_types=True, help_flags=["help", "h"])
    """

    parse: bool = Field(default=True, description="Split flags from arguments at all")
    prefixes: list[str] = Field(
        default_factory=lambda: ["--", "-"],
        description="Flag markers; matched longest first",
    )
    infer_types: bool = Field(
        default=True, description="Convert flag values to bool, int, float or None"
    )
    ignore_empty_flags: bool = Field(
        default=False,
        description="Drop flags left without a value (explicit 'null' values are kept)",
    )
    parse_empty_flags: bool = Field(
        default=False,
        description="Treat a bare prefix such as '--' as a flag named ''",
    )
    help_flags: list[str] = Field(
        default_factory=lambda: ["h", "help", "?"],
        description="Flag names that switch the invocation to help output",
    )

    @property
    def active_prefixes(self) -> list[str]:
        """Non-empty, unique prefixes sorted longest first."""
        unique = {prefix for prefix in self.prefixes if prefix}
        return sorted(unique, key=lambda prefix: (-len(prefix), prefix))


class ArgumentOptions(BaseModel):
    """Where raw tokens come from and how they are split."""

    origin: list[str] = Field(
        default_factory=lambda: list(sys.argv),
        description="Raw token source, sys.argv by default",
    )
    ignore_first: int = Field(
        default=1, ge=0, description="Leading tokens to drop (the program name)"
    )
    flags: FlagOptions = Field(default_factory=FlagOptions)


class BehaviorOptions(BaseModel):
    """Runtime behaviour of the pipeline."""

    debug_mode: bool = Field(
        default=False,
        description="Return output and raise errors instead of printing and exiting",
    )
    colorful_output: bool = Field(default=True, description="Allow colour in output")
    logger: Optional[Callable[[str], Any]] = Field(
        default=None,
        description="Replacement sink for the final output; may be a coroutine function",
    )


class CliCoreOptions(BaseModel):
    """Full configuration of one application.

    ``commands``, ``extensions`` and ``help`` hold application objects and are
    validated by the modules that consume them
    (:func:`~clicore.commands.build_command_tree`,
    :class:`~clicore.extensions.bundler.ExtensionBundler` and
    :class:`~clicore.descriptor.Descriptor`).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    app_name: str = Field(default="clicore-application", min_length=1)
    app_description: Optional[str] = None
    arguments: ArgumentOptions = Field(default_factory=ArgumentOptions)
    behavior: BehaviorOptions = Field(default_factory=BehaviorOptions)
    context: dict[str, Any] = Field(
        default_factory=dict, description="Application values exposed to commands"
    )
    commands: Any = Field(default_factory=dict)
    extensions: list[Any] = Field(default_factory=list)
    help: dict[str, Any] = Field(default_factory=dict)

    @field_validator("app_name")
    @classmethod
    def _no_whitespace(cls, value: str) -> str:
        if any(char.isspace() for char in value):
            raise ValueError("app_name must not contain whitespace")
        return value


# --- Pipeline values ---


@dataclass(frozen=True)
class ParsedArguments:
    """Output of :meth:`clicore.parser.Parser.parse`.

    Attributes:
        args: Positional tokens, in order.
        flags: Flag names mapped to their (possibly inferred) values.
    """

    args: list[Argument] = field(default_factory=list)
    flags: Flags = field(default_factory=dict)


class RoutingStatus(str, enum.Enum):
    """Terminal decision of the router."""

    ERROR = "error"
    HELP = "help"
    CALLBACK = "callback"


@dataclass(frozen=True)
class RoutingResult:
    """Output of :meth:`clicore.router.Router.navigate`.

    ``before_running`` interceptors may swap it for another instance (for
    example with :func:`dataclasses.replace`) to run a command that is not
    in the static tree.

    Attributes:
        status: ``ERROR`` when *result* is an exception, ``CALLBACK`` when
            *result* is the command to run, ``HELP`` when help was requested
            or the route ended at a group.
        command_chain: Tree keys consumed before the decision.
        command_args: Arguments left after the chain.
        result: The error, the resolved command, or ``None``.
    """

    status: RoutingStatus
    command_chain: tuple[str, ...] = ()
    command_args: tuple[Argument, ...] = ()
    result: Union[BaseException, Command, None] = None


@dataclass(frozen=True)
class Stdio:
    """The streams handed to a running command."""

    stdin: IO[str] = field(default_factory=lambda: sys.stdin)
    stdout: IO[str] = field(default_factory=lambda: sys.stdout)
    stderr: IO[str] = field(default_factory=lambda: sys.stderr)
