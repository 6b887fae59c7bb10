"""Shared test fixtures for clicore.

Provides an application factory with test-friendly defaults, a sample command
tree and help tree, and isolation from environment variables that change
clicore's behaviour. These fixtures are discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from clicore import CliCore, get_context
from clicore.models import NO_OUTPUT


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear the variables read by clicore.config.resolve_options."""
    for var in ["CLICORE_DEBUG", "TEST_APP_DEBUG", "NO_COLOR", "TERM"]:
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Command and help trees
# ---------------------------------------------------------------------------


def _calculate(args: list[Any], flags: dict[str, Any]) -> str:
    """Apply an arithmetic operation to the arguments."""
    helpers = get_context().helpers
    operation = helpers.get_flag("operation", "op", "O")
    numbers = [float(arg) for arg in args]
    if operation == "sum":
        total = sum(numbers)
    elif operation == "multiply":
        total = 1.0
        for number in numbers:
            total *= number
    else:
        raise ValueError("Unsupported operation")
    return f"{total:g}"


def _echo(args: list[Any], flags: dict[str, Any]) -> str:
    """Print the arguments back."""
    return " ".join(str(arg) for arg in args)


def _silent(args: list[Any], flags: dict[str, Any]) -> Any:
    return NO_OUTPUT


@pytest.fixture
def sample_commands() -> dict[str, Any]:
    """A small command tree with one nested group."""
    return {
        "math": {
            "operations": {
                "calculate": _calculate,
            },
        },
        "echo": _echo,
        "silent": _silent,
    }


@pytest.fixture
def sample_help() -> dict[str, Any]:
    """Help tree matching :func:`sample_commands`."""
    return {
        "math": {
            "description": "Math commands",
            "subcommands": {
                "operations": {
                    "description": "Math operations commands",
                    "subcommands": {
                        "calculate": {
                            "description": "Make simple arithmetic operations",
                            "args": [{"name": "number", "multiple": True}],
                            "flags": {
                                "operation": {
                                    "description": "Operation to perform",
                                    "aliases": ["op", "O"],
                                    "optional": False,
                                    "values": ["sum", "multiply"],
                                },
                            },
                        },
                    },
                },
            },
        },
        "echo": "Print the arguments back",
        "silent": "Print nothing",
    }


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_app(sample_commands: dict[str, Any], sample_help: dict[str, Any]) -> Callable[..., CliCore]:
    """Factory for applications with test-friendly defaults.

    Debug mode is on (output is returned, errors are raised), no leading
    tokens are ignored and colour is off. Keyword arguments override the
    top-level options; ``debug_mode`` toggles the behaviour section.
    """

    def _make(debug_mode: bool = True, **overrides: Any) -> CliCore:
        options: dict[str, Any] = {
            "app_name": "test-app",
            "app_description": "Test application",
            "commands": sample_commands,
            "help": sample_help,
            "arguments": {"origin": [], "ignore_first": 0},
            "behavior": {"debug_mode": debug_mode, "colorful_output": False},
        }
        options.update(overrides)
        return CliCore(options)

    return _make
