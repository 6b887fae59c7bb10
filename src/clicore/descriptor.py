"""Render help text from a declarative help tree.

The help tree mirrors the command tree. Each entry is one of:

* a string -- a one-line description;
* a command descriptor -- ``description``, ``args``, ``flags``, ``stdio``;
* a group descriptor -- ``description`` and ``subcommands``.

Example::

    help = {
        "math": {
            "description": "Math commands",
            "subcommands": {
                "sum": {
                    "description": "Add numbers",
                    "args": [{"name": "number", "multiple": True}],
                    "flags": {"precision": {"description": "Digits", "aliases": ["p"]}},
                },
            },
        },
        "version": "Print the version",
    }

Applications made of a single command pass a single command descriptor
instead of a mapping.

:meth:`Descriptor.render` is called by the pipeline whenever routing ends in
help. A chain the tree does not describe renders a "No help found" line
rather than failing.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clicore.exceptions import ConfigError
from clicore.models import FlagOptions

_COMMAND_KEYS = {"description", "args", "flags", "stdio"}


# --- Help tree models ---


class ArgDescriptor(BaseModel):
    """A positional argument of a command."""

    name: str
    optional: bool = False
    multiple: bool = Field(default=False, description="Repeatable; must be the last argument")


class FlagDescriptor(BaseModel):
    """A flag of a command."""

    description: str
    aliases: list[str] = Field(default_factory=list)
    optional: bool = True
    values: list[str] = Field(default_factory=list)


class StdioDescriptor(BaseModel):
    """What a command reads from or writes to the standard streams."""

    stdin: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None


class CommandDescriptor(BaseModel):
    """Help for a runnable command."""

    model_config = ConfigDict(extra="forbid")

    description: str
    args: list[Union[str, ArgDescriptor]] = Field(default_factory=list)
    flags: dict[str, Union[str, FlagDescriptor]] = Field(default_factory=dict)
    stdio: StdioDescriptor = Field(default_factory=StdioDescriptor)


class GroupDescriptor(BaseModel):
    """Help for a command group."""

    model_config = ConfigDict(extra="forbid")

    description: Optional[str] = None
    subcommands: dict[str, Union[str, CommandDescriptor, GroupDescriptor]] = Field(
        default_factory=dict
    )


GroupDescriptor.model_rebuild()

HelpEntry = Union[str, CommandDescriptor, GroupDescriptor]


def parse_help_tree(tree: Any) -> Union[CommandDescriptor, dict[str, HelpEntry]]:
    """Validate a help tree into descriptor models.

    Raises:
        ConfigError: If the tree does not match the descriptor shapes.
    """
    if isinstance(tree, CommandDescriptor):
        return tree
    if not isinstance(tree, Mapping):
        raise ConfigError(f"Help tree must be a mapping, got {type(tree).__name__}")
    try:
        if _looks_like_command(tree):
            return CommandDescriptor.model_validate(dict(tree))
        return {str(name): _parse_entry(entry) for name, entry in tree.items()}
    except ValidationError as exc:
        raise ConfigError(f"Invalid help tree: {exc}") from exc


def _looks_like_command(tree: Mapping[str, Any]) -> bool:
    return (
        isinstance(tree.get("description"), str)
        and set(tree) <= _COMMAND_KEYS
        and any(key in tree for key in ("args", "flags", "stdio"))
    )


def _parse_entry(entry: Any) -> HelpEntry:
    if isinstance(entry, (str, CommandDescriptor, GroupDescriptor)):
        return entry
    if isinstance(entry, Mapping):
        if "subcommands" in entry:
            return GroupDescriptor.model_validate(dict(entry))
        return CommandDescriptor.model_validate(dict(entry))
    raise ConfigError(f"Invalid help entry: {entry!r}")


# --- Renderer ---


class Descriptor:
    """Help renderer for one application.

    Args:
        app_name: Shown at the start of every help text.
        app_description: Shown in the top-level help.
        flag_options: Used to print flags with the prefixes the parser accepts.
        help_tree: The declarative help tree (see module docstring).

    Raises:
        ConfigError: If the tree is malformed, declares flags while no flag
            prefix is configured, or declares an empty flag name while empty
            flags are not parsed.
    """

    def __init__(
        self,
        app_name: str,
        app_description: Optional[str],
        flag_options: FlagOptions,
        help_tree: Any = None,
    ) -> None:
        self._app_name = app_name
        self._app_description = app_description
        self._flag_options = flag_options
        self._prefixes = flag_options.active_prefixes
        self._tree = parse_help_tree(help_tree or {})
        self._validate_flags()

    def render(self, command_chain: Sequence[str] = ()) -> str:
        """Return the help text for *command_chain*."""
        chain = list(command_chain)

        if isinstance(self._tree, CommandDescriptor):
            if chain:
                return self._no_help(chain)
            return self._render_command(self._app_name, self._tree)

        if not self._tree:
            return self._no_help(chain)

        if not chain:
            return self._render_root(self._tree)

        entry: Optional[HelpEntry] = self._tree.get(chain[0])
        for name in chain[1:]:
            if not isinstance(entry, GroupDescriptor):
                return self._no_help(chain)
            entry = entry.subcommands.get(name)

        if entry is None:
            return self._no_help(chain)

        title = f"{self._app_name} {' '.join(chain)}"

        if isinstance(entry, str):
            return f"{title}\n  Description: {entry}"

        if isinstance(entry, GroupDescriptor):
            lines = [title]
            if entry.description:
                lines.append(f"  Description: {entry.description}")
            lines.append("  Subcommands:")
            lines.extend(self._render_subcommands(entry.subcommands))
            return "\n".join(lines)

        return self._render_command(title, entry)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _no_help(self, chain: Sequence[str]) -> str:
        return f'No help found for command "{" ".join((self._app_name, *chain))}"'

    def _render_root(self, tree: dict[str, HelpEntry]) -> str:
        lines = [self._app_name]
        if self._app_description:
            lines.append(f"  Description: {self._app_description}")
        lines.append("  Commands:")
        lines.extend(self._render_subcommands(tree))
        return "\n".join(lines)

    def _render_command(self, title: str, command: CommandDescriptor) -> str:
        if command.args:
            title = f"{title} {self._render_args(command.args)}"
        lines = [title, f"  Description: {command.description}"]

        if command.flags:
            lines.append("  Flags:")
            lines.extend(self._render_flags(command.flags))

        stdio = [
            (stream, text)
            for stream, text in (
                ("stdin", command.stdio.stdin),
                ("stdout", command.stdio.stdout),
                ("stderr", command.stdio.stderr),
            )
            if text
        ]
        if stdio:
            lines.append("  Stdio:")
            lines.extend(f"    {stream}: {text}" for stream, text in stdio)

        return "\n".join(lines)

    @staticmethod
    def _render_subcommands(subcommands: Mapping[str, HelpEntry]) -> list[str]:
        lines = []
        for name, entry in subcommands.items():
            if isinstance(entry, str):
                lines.append(f"    {name}: {entry}")
            elif entry.description:
                lines.append(f"    {name}: {entry.description}")
            else:
                lines.append(f"    {name}")
        return lines

    @staticmethod
    def _render_args(args: Sequence[Union[str, ArgDescriptor]]) -> str:
        rendered = []
        for arg in args:
            if isinstance(arg, str):
                rendered.append(f"<{arg}>")
                continue
            text = f"<{arg.name}>"
            if arg.multiple:
                text = f"{text}..."
            if arg.optional:
                text = f"[{text}]"
            rendered.append(text)
        return " ".join(rendered)

    def _render_flags(self, flags: Mapping[str, Union[str, FlagDescriptor]]) -> list[str]:
        lines = []
        for name, flag in flags.items():
            if isinstance(flag, str):
                lines.append(f"    {self._flag_names(name, [])}: {flag}")
                continue
            line = f"    {self._flag_names(name, flag.aliases)}"
            if not flag.optional:
                line += " (required)"
            line += f": {flag.description}"
            lines.append(line)
            if flag.values:
                lines.append(f"      Values: {' | '.join(flag.values)}")
        return lines

    def _flag_names(self, name: str, aliases: Sequence[str]) -> str:
        return " | ".join(self._flag_name(flag) for flag in (name, *aliases))

    def _flag_name(self, name: str) -> str:
        longest, shortest = self._prefixes[0], self._prefixes[-1]
        if not name:
            return f"{longest}<empty>"
        if len(name) == 1:
            return f"{shortest}{name}"
        return f"{longest}{name}"

    def _validate_flags(self) -> None:
        names = list(_declared_flag_names(self._tree))
        if not names:
            return
        if not self._flag_options.parse or not self._prefixes:
            raise ConfigError("Help tree declares flags but flag parsing is disabled")
        if "" in names and not self._flag_options.parse_empty_flags:
            raise ConfigError("Help tree declares an empty flag name but empty flags are not parsed")


def _declared_flag_names(tree: Any) -> list[str]:
    if isinstance(tree, CommandDescriptor):
        names: list[str] = []
        for name, flag in tree.flags.items():
            names.append(name)
            if isinstance(flag, FlagDescriptor):
                names.extend(flag.aliases)
        return names
    if isinstance(tree, GroupDescriptor):
        return _declared_flag_names(tree.subcommands)
    if isinstance(tree, Mapping):
        names = []
        for entry in tree.values():
            names.extend(_declared_flag_names(entry))
        return names
    return []
