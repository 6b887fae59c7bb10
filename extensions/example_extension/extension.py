"""Example extension that times invocations and exposes a stopwatch addon."""

from __future__ import annotations

import time
from typing import Any, Optional

from clicore.extensions import AddonBuildContext, Extension, InterceptorContext
from clicore.models import RoutingResult


class TimingExtension(Extension):
    """Logs how long each invocation took, and which route it resolved to."""

    def __init__(self) -> None:
        self._started: Optional[float] = None
        self.routes: list[tuple[str, ...]] = []
        self.elapsed: Optional[float] = None

    @property
    def name(self) -> str:
        return "timing"

    @property
    def description(self) -> str:
        return "Times invocations and exposes a stopwatch to commands"

    def build_command_addons(self, ctx: AddonBuildContext) -> dict[str, Any]:
        return {"elapsed": self._elapsed_so_far}

    def before_parsing(self, ctx: InterceptorContext, raw_args: list[str]) -> list[str]:
        self._started = time.perf_counter()
        return raw_args

    def before_running(self, ctx: InterceptorContext, routing: RoutingResult) -> RoutingResult:
        self.routes.append(routing.command_chain)
        ctx.logger.debug(f"route: {' '.join(routing.command_chain) or '<root>'}")
        return routing

    def before_ending(self, ctx: InterceptorContext) -> None:
        self.elapsed = self._elapsed_so_far()
        ctx.logger.debug(f"finished in {self.elapsed:.3f}s")

    def _elapsed_so_far(self) -> float:
        if self._started is None:
            return 0.0
        return time.perf_counter() - self._started
