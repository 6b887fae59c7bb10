"""Flow interceptor registry and runner.

:class:`FlowInterceptors` is the registry built once per application by
:meth:`~clicore.extensions.bundler.ExtensionBundler.get_interceptors`: for
each stage, an ordered list of :class:`Interceptor` entries in extension
registration order.

:class:`InterceptorRunner` folds a value through one stage: every interceptor
receives the previous interceptor's output, and each one completes (awaited
if it returns an awaitable) before the next starts. Stages never interleave.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from clicore.extensions.base import STAGES
from clicore.models import CliCoreOptions
from clicore.output import Logger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interceptor:
    """One registered interceptor and the extension it came from."""

    callback: Callable[..., Any]
    extension_name: str


@dataclass(frozen=True)
class InterceptorContext:
    """First argument of every interceptor call.

    Attributes:
        app_name: Name of the application.
        options: The application's options (read-only by convention).
        extension_name: Name of the extension owning the interceptor.
        logger: Logger whose origin is
            ``<app>::Extensions::<name>.interceptors``.
    """

    app_name: str
    options: CliCoreOptions
    extension_name: str
    logger: Logger


@dataclass
class FlowInterceptors:
    """Interceptors per stage, in registration order."""

    before_parsing: list[Interceptor] = field(default_factory=list)
    before_routing: list[Interceptor] = field(default_factory=list)
    before_running: list[Interceptor] = field(default_factory=list)
    before_error: list[Interceptor] = field(default_factory=list)
    before_printing: list[Interceptor] = field(default_factory=list)
    before_ending: list[Interceptor] = field(default_factory=list)

    def for_stage(self, stage: str) -> list[Interceptor]:
        if stage not in STAGES:
            raise KeyError(f"Unknown interceptor stage: {stage}")
        return getattr(self, stage)

    def add(self, stage: str, interceptor: Interceptor) -> None:
        self.for_stage(stage).append(interceptor)

    def __len__(self) -> int:
        return sum(len(self.for_stage(stage)) for stage in STAGES)


class InterceptorRunner:
    """Runs the interceptors of one application.

    Args:
        interceptors: The registry to run.
        options: Passed to every interceptor through its context.
        logger: Parent logger; each extension gets a child of it.
    """

    def __init__(self, interceptors: FlowInterceptors, options: CliCoreOptions, logger: Logger) -> None:
        self._interceptors = interceptors
        self._options = options
        self._logger = logger
        self._contexts: dict[str, InterceptorContext] = {}

    def _context(self, extension_name: str) -> InterceptorContext:
        ctx = self._contexts.get(extension_name)
        if ctx is None:
            ctx = InterceptorContext(
                app_name=self._options.app_name,
                options=self._options,
                extension_name=extension_name,
                logger=self._logger.child(
                    f"{self._options.app_name}::Extensions::{extension_name}.interceptors"
                ),
            )
            self._contexts[extension_name] = ctx
        return ctx

    async def run(self, stage: str, value: Any) -> Any:
        """Fold *value* through every interceptor of *stage* and return the result."""
        for interceptor in self._interceptors.for_stage(stage):
            logger.debug("Running %s interceptor of '%s'", stage, interceptor.extension_name)
            value = await _resolve(interceptor.callback(self._context(interceptor.extension_name), value))
        return value

    async def run_ending(self) -> None:
        """Run every ``before_ending`` interceptor for its side effects."""
        for interceptor in self._interceptors.before_ending:
            logger.debug("Running before_ending interceptor of '%s'", interceptor.extension_name)
            await _resolve(interceptor.callback(self._context(interceptor.extension_name)))


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result
