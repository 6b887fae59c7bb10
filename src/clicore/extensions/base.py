"""Base class for clicore extensions.

An extension contributes to an application in up to two ways:

* **Command addons** -- :meth:`Extension.build_command_addons` returns a plain
  ``dict`` of values (usually functions) that running commands find under
  ``get_context().extensions[<extension name>]``.
* **Flow interceptors** -- methods named after a pipeline stage. Each one
  receives an :class:`~clicore.extensions.interceptors.InterceptorContext`
  and the stage's current value, and returns the value handed to the next
  interceptor. Interceptors may be plain or ``async`` methods.

Only the methods a subclass overrides are registered. An extension that
overrides nothing is a configuration error.

Example:
    An extension that adds a ``--verbose`` flag to every invocation and
    upper-cases the output::

        class Shout(Extension):
            @property
            def name(self) -> str:
                return "shout"

            def before_parsing(self, ctx, raw_args):
                return [*raw_args, "--verbose"]

            def before_printing(self, ctx, output):
                return output.upper() if isinstance(output, str) else output
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from clicore.exceptions import ExtensionError
from clicore.models import CliCoreOptions, Output, ParsedArguments, RoutingResult

if TYPE_CHECKING:
    from clicore.extensions.interceptors import InterceptorContext
    from clicore.output import Logger

STAGES: tuple[str, ...] = (
    "before_parsing",
    "before_routing",
    "before_running",
    "before_error",
    "before_printing",
    "before_ending",
)
"""Pipeline stages, in the order an invocation reaches them."""


@dataclass
class AddonBuildContext:
    """Passed to :meth:`Extension.build_command_addons`.

    Attributes:
        app_name: Name of the application.
        options: The application's options.
        addons: Addons bundled so far from extensions registered earlier.
        logger: Logger whose origin is ``<app>::Extensions::<name>.addons``.
    """

    app_name: str
    options: CliCoreOptions
    logger: Logger
    addons: dict[str, dict[str, Any]] = field(default_factory=dict)


class Extension(ABC):
    """Base class for all extensions.

    Subclasses must implement :attr:`name` and override at least one of
    :meth:`build_command_addons` or the stage methods.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique extension name; also the key of its addons.

        Must match ``^[A-Za-z_][A-Za-z0-9_]*$``.
        """
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return ""

    def provides_addons(self) -> bool:
        return _overrides(self, "build_command_addons")

    def supplied_stages(self) -> list[str]:
        """Names of the stages this extension intercepts."""
        return [stage for stage in STAGES if _overrides(self, stage)]

    def interceptor(self, stage: str) -> Callable[..., Any]:
        return getattr(self, stage)

    def build_command_addons(self, ctx: AddonBuildContext) -> dict[str, Any]:
        """Return the addons exposed to commands under this extension's name."""
        return {}

    # Stage methods. The defaults pass values through unchanged and are
    # never registered.

    def before_parsing(self, ctx: InterceptorContext, raw_args: list[str]) -> list[str]:
        return raw_args

    def before_routing(self, ctx: InterceptorContext, parsed: ParsedArguments) -> ParsedArguments:
        return parsed

    def before_running(self, ctx: InterceptorContext, routing: RoutingResult) -> RoutingResult:
        return routing

    def before_error(self, ctx: InterceptorContext, error: BaseException) -> Any:
        return error

    def before_printing(self, ctx: InterceptorContext, output: Output) -> Output:
        return output

    def before_ending(self, ctx: InterceptorContext) -> None:
        return None


class FunctionExtension(Extension):
    """An extension assembled from plain functions.

    Example::

        audit = FunctionExtension(
            "audit",
            before_running=lambda ctx, routing: log_route(routing) or routing,
        )
    """

    def __init__(
        self,
        name: str,
        build_command_addons: Optional[Callable[[AddonBuildContext], dict[str, Any]]] = None,
        **interceptors: Callable[..., Any],
    ) -> None:
        unknown = sorted(set(interceptors) - set(STAGES))
        if unknown:
            raise ExtensionError(
                f"Unknown interceptor stage(s) for extension \"{name}\": {', '.join(unknown)}"
            )
        self._name = name
        self._addons_factory = build_command_addons
        self._interceptors = interceptors

    @property
    def name(self) -> str:
        return self._name

    def provides_addons(self) -> bool:
        return self._addons_factory is not None

    def supplied_stages(self) -> list[str]:
        return [stage for stage in STAGES if stage in self._interceptors]

    def interceptor(self, stage: str) -> Callable[..., Any]:
        return self._interceptors[stage]

    def build_command_addons(self, ctx: AddonBuildContext) -> dict[str, Any]:
        if self._addons_factory is None:
            return {}
        return self._addons_factory(ctx)


def _overrides(extension: Extension, attribute: str) -> bool:
    return getattr(type(extension), attribute) is not getattr(Extension, attribute)
