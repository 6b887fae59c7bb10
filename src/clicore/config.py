"""Option resolution with defaults and environment overrides.

Applications may configure clicore with a :class:`~clicore.models.CliCoreOptions`
instance or with a plain (possibly partial, possibly nested) mapping::

    resolve_options({
        "app_name": "mytool",
        "arguments": {"flags": {"prefixes": ["--"]}},
        "commands": {...},
    })

Missing keys take the model defaults. Environment variables then override
the resolved values, highest precedence first:

* ``<APP>_DEBUG`` -- where ``<APP>`` is the upper-cased app name with
  non-alphanumerics replaced by ``_``;
* ``CLICORE_DEBUG``;
* ``NO_COLOR`` -- any value disables colour output.

Boolean variables accept ``1/true/yes/on`` and ``0/false/no/off``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from clicore.exceptions import ConfigError
from clicore.models import CliCoreOptions

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def env_prefix(app_name: str) -> str:
    """Return the environment variable prefix for *app_name* (``my-tool`` -> ``MY_TOOL``)."""
    return re.sub(r"[^A-Za-z0-9]", "_", app_name).upper()


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {raw!r}")


def resolve_options(options: Union[CliCoreOptions, Mapping[str, Any], None] = None) -> CliCoreOptions:
    """Build the effective options from *options*, defaults and the environment.

    The input is never mutated; a new :class:`~clicore.models.CliCoreOptions`
    is returned.

    Raises:
        ConfigError: If the options fail validation or an environment
            override is malformed.
    """
    try:
        if options is None:
            resolved = CliCoreOptions()
        elif isinstance(options, CliCoreOptions):
            resolved = options.model_copy(deep=False)
        elif isinstance(options, Mapping):
            resolved = CliCoreOptions.model_validate(dict(options))
        else:
            raise ConfigError(
                f"Options must be a CliCoreOptions or a mapping, got {type(options).__name__}"
            )
    except ValidationError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc

    behavior = resolved.behavior.model_copy()

    for var in (f"{env_prefix(resolved.app_name)}_DEBUG", "CLICORE_DEBUG"):
        debug = _env_bool(var)
        if debug is not None:
            behavior.debug_mode = debug
            break

    if os.environ.get("NO_COLOR") is not None:
        behavior.colorful_output = False

    return resolved.model_copy(update={"behavior": behavior})
