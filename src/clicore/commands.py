"""The command tree: a tagged union of runnable commands and command groups.

Applications describe their commands with plain Python values::

    commands = {
        "math": {
            "sum": lambda args, flags: str(sum(map(int, args))),
        },
        "version": show_version,
    }

:func:`build_command_tree` turns that description into :class:`Command`
leaves and :class:`CommandGroup` nodes, so the router never has to guess
whether a node is callable. A tree may also be a single command, for
applications without subcommands.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from typing import Any, Awaitable, Callable, Optional, Union

from clicore.exceptions import ConfigError
from clicore.models import Argument, Flags, Output

CommandCallback = Callable[[list[Argument], Flags], Union[Output, None, Awaitable[Any]]]


class Command:
    """A runnable leaf of the command tree.

    Args:
        callback: Called with ``(args, flags)``. It may return text,
            :data:`~clicore.models.NO_OUTPUT`, ``None`` (treated as no
            output) or an awaitable resolving to one of those.
        name: Optional display name, defaults to the callback's name.
        description: Optional one-line description.
    """

    def __init__(
        self,
        callback: CommandCallback,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        if not callable(callback):
            raise ConfigError(f"Command callback must be callable, got {type(callback).__name__}")
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "command")
        self.description = description or _first_doc_line(callback)

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.callback)

    def __call__(self, args: list[Argument], flags: Flags) -> Any:
        return self.callback(args, flags)

    def __repr__(self) -> str:
        return f"Command({self.name!r})"


class CommandGroup(Mapping[str, "CommandNode"]):
    """An intermediate node mapping subcommand names to child nodes.

    Insertion order is kept for help listings; lookups are by exact name.
    """

    def __init__(
        self,
        children: Optional[Mapping[str, CommandNode]] = None,
        description: Optional[str] = None,
    ) -> None:
        self._children: dict[str, CommandNode] = dict(children or {})
        self.description = description

    def __getitem__(self, name: str) -> CommandNode:
        return self._children[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def set(self, name: str, node: CommandNode) -> None:
        """Add or replace the child *name*."""
        self._children[name] = node

    def remove(self, name: str) -> Optional[CommandNode]:
        """Remove the child *name* and return it, or ``None`` if absent."""
        return self._children.pop(name, None)

    def __repr__(self) -> str:
        return f"CommandGroup({list(self._children)!r})"


CommandNode = Union[Command, CommandGroup]


def command(
    callback: Optional[CommandCallback] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Wrap a function into a :class:`Command`.

    Usable bare (``@command``) or with arguments
    (``@command(description="...")``).
    """

    def decorator(fn: CommandCallback) -> Command:
        return Command(fn, name=name, description=description)

    if callback is not None:
        return decorator(callback)
    return decorator


def build_command_tree(tree: Any) -> CommandNode:
    """Normalise an application command description into tagged nodes.

    Accepted values: :class:`Command`, :class:`CommandGroup`, any callable
    (wrapped into a :class:`Command`) and any mapping of names to accepted
    values (turned into a :class:`CommandGroup`).

    Raises:
        ConfigError: For non-string keys, unsupported values, or a mapping
            that contains itself.
    """
    return _build(tree, (), set())


def _build(tree: Any, path: tuple[str, ...], seen: set[int]) -> CommandNode:
    if isinstance(tree, Command):
        return tree

    if isinstance(tree, (Mapping, CommandGroup)):
        if id(tree) in seen:
            raise ConfigError(f"Command tree contains a cycle at \"{' '.join(path)}\"")
        seen = seen | {id(tree)}
        group = CommandGroup(description=getattr(tree, "description", None))
        for key, child in tree.items():
            if not isinstance(key, str):
                raise ConfigError(
                    f"Command names must be strings, got {key!r} under \"{' '.join(path)}\""
                )
            group.set(key, _build(child, (*path, key), seen))
        return group

    if callable(tree):
        name = path[-1] if path else None
        return Command(tree, name=name)

    location = " ".join(path) or "<root>"
    raise ConfigError(
        f"Invalid command at \"{location}\": expected a callable or a mapping, "
        f"got {type(tree).__name__}"
    )


def iter_commands(node: CommandNode, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Command]]:
    """Yield ``(chain, command)`` for every leaf under *node*, depth first."""
    if isinstance(node, Command):
        yield prefix, node
        return
    for name, child in node.items():
        yield from iter_commands(child, (*prefix, name))


def _first_doc_line(obj: Any) -> Optional[str]:
    doc = inspect.getdoc(obj)
    if not doc:
        return None
    return doc.strip().splitlines()[0]
