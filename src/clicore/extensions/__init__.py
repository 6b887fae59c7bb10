"""Extension system for clicore -- addons, flow interceptors and discovery.

Key classes:

* :class:`Extension` -- Base class every extension subclasses.
* :class:`FunctionExtension` -- An extension assembled from plain functions.
* :class:`ExtensionBundler` -- Validates extensions, bundles their addons
  and collects their interceptors.
* :class:`InterceptorRunner` -- Folds pipeline values through the
  interceptors of one stage.
"""

from clicore.extensions.base import STAGES, AddonBuildContext, Extension, FunctionExtension
from clicore.extensions.bundler import ENTRY_POINT_GROUP, ExtensionBundler, discover_extensions
from clicore.extensions.interceptors import (
    FlowInterceptors,
    Interceptor,
    InterceptorContext,
    InterceptorRunner,
)

__all__ = [
    "STAGES",
    "AddonBuildContext",
    "ENTRY_POINT_GROUP",
    "Extension",
    "ExtensionBundler",
    "FlowInterceptors",
    "FunctionExtension",
    "Interceptor",
    "InterceptorContext",
    "InterceptorRunner",
    "discover_extensions",
]
