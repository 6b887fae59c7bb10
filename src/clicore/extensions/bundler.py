"""Extension validation, addon bundling and interceptor collection.

:class:`ExtensionBundler` is built once per :class:`~clicore.core.CliCore`.
Everything it checks is a configuration error raised while the application
is being set up, before any interceptor fires or any command runs:

* names must match :data:`NAME_PATTERN` and be unique;
* each extension must provide addons or intercept at least one stage;
* addon factories must return a plain ``dict``.

Extensions may also come from installed packages. Packages register them as
entry points in the ``clicore.extensions`` group of their ``pyproject.toml``::

    [project.entry-points."clicore.extensions"]
    audit = "my_package.audit:AuditExtension"

and applications load them with :func:`discover_extensions`.
"""

from __future__ import annotations

import importlib.metadata
import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any, Optional

from clicore.exceptions import ExtensionError
from clicore.extensions.base import AddonBuildContext, Extension
from clicore.extensions.interceptors import FlowInterceptors, Interceptor
from clicore.models import CliCoreOptions
from clicore.output import Logger

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "clicore.extensions"
"""The entry-point group name used for extension discovery."""

NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
"""Valid extension names: usable as identifiers and as addon keys."""


class ExtensionBundler:
    """Validates extensions and derives their addons and interceptors.

    Args:
        options: The application's options; ``options.extensions`` is the
            ordered list of :class:`~clicore.extensions.base.Extension`
            instances.
        logger: Parent logger for the loggers handed to extensions.

    Raises:
        ExtensionError: If any extension is invalid.
    """

    def __init__(self, options: CliCoreOptions, logger: Logger) -> None:
        self._options = options
        self._logger = logger
        self._extensions: list[Extension] = list(options.extensions)
        self.validate()

    @property
    def extensions(self) -> list[Extension]:
        return list(self._extensions)

    def validate(self) -> None:
        """Check names, uniqueness and that every extension contributes something."""
        seen: set[str] = set()

        for extension in self._extensions:
            if not isinstance(extension, Extension):
                raise ExtensionError(
                    f"Invalid extension {extension!r}: extensions must subclass "
                    "clicore.extensions.Extension"
                )

            name = extension.name
            if not isinstance(name, str) or not NAME_PATTERN.match(name):
                raise ExtensionError(
                    f'Invalid name for extension: "{name}". Extension names must '
                    f"follow this regular expression: {NAME_PATTERN.pattern}"
                )

            if name in seen:
                raise ExtensionError(
                    f'Multiple extensions with name "{name}" detected, please remove '
                    "any collision or duplicates"
                )
            seen.add(name)

            if not extension.provides_addons() and not extension.supplied_stages():
                raise ExtensionError(
                    f'Extension "{name}" does not have any command addons nor flow interceptors'
                )

    def get_interceptors(self) -> FlowInterceptors:
        """Collect the interceptors of every extension, stage by stage.

        Returns:
            A :class:`~clicore.extensions.interceptors.FlowInterceptors`
            whose lists follow extension registration order.
        """
        interceptors = FlowInterceptors()
        for extension in self._extensions:
            for stage in extension.supplied_stages():
                interceptors.add(stage, Interceptor(extension.interceptor(stage), extension.name))
        return interceptors

    def bundle(self) -> dict[str, dict[str, Any]]:
        """Build the command addons of every extension.

        Each factory sees the addons of the extensions registered before it.
        Empty bundles are left out.

        Returns:
            Addons keyed by extension name.

        Raises:
            ExtensionError: If a factory does not return a plain ``dict``.
        """
        addons: dict[str, dict[str, Any]] = {}

        for extension in self._extensions:
            if not extension.provides_addons():
                continue

            name = extension.name
            ctx = AddonBuildContext(
                app_name=self._options.app_name,
                options=self._options,
                logger=self._logger.child(f"{self._options.app_name}::Extensions::{name}.addons"),
                addons=addons,
            )
            bundle = extension.build_command_addons(ctx)

            if type(bundle) is not dict:
                raise ExtensionError(
                    f'Invalid extension build for "{name}". The result is not a dict'
                )

            if not bundle and not extension.supplied_stages():
                raise ExtensionError(
                    f'Extension "{name}" does not have any command addons nor flow interceptors'
                )

            if bundle:
                addons[name] = bundle
                logger.debug("Bundled %d addon(s) from extension '%s'", len(bundle), name)

        return addons


def discover_extensions(
    group: str = ENTRY_POINT_GROUP,
    enabled: Optional[Iterable[str]] = None,
    disabled: Optional[Iterable[str]] = None,
) -> list[Extension]:
    """Instantiate extensions registered as Python entry points.

    When *enabled* is non-empty only those entry points are loaded; otherwise
    every entry point not in *disabled* is. Entry points that fail to load
    are logged as warnings and skipped.

    Returns:
        Extension instances in entry-point order.
    """
    enabled_set = set(enabled or ())
    disabled_set = set(disabled or ())
    found: list[Extension] = []

    for ep in _entry_points(group):
        if enabled_set and ep.name not in enabled_set:
            logger.debug("Extension '%s' not in enabled list, skipping", ep.name)
            continue
        if ep.name in disabled_set:
            logger.debug("Extension '%s' is disabled, skipping", ep.name)
            continue

        try:
            extension_cls = ep.load()
            extension = extension_cls()
        except Exception as exc:
            logger.warning("Failed to load extension '%s': %s", ep.name, exc)
            continue

        if not isinstance(extension, Extension):
            logger.warning("Entry point '%s' is not a clicore extension, skipping", ep.name)
            continue

        logger.info("Loaded extension '%s' v%s", extension.name, extension.version)
        found.append(extension)

    return found


def _entry_points(group: str) -> Sequence[importlib.metadata.EntryPoint]:
    entry_points = importlib.metadata.entry_points()
    if hasattr(entry_points, "select"):
        return list(entry_points.select(group=group))
    return list(entry_points.get(group, []))  # type: ignore[union-attr]
