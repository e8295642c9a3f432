"""Ordered, name-indexed command registries.

A registry keeps commands in an ordered list together with an index
from every lowercased name and alias to the command's position. Both
structures are only ever touched together, under the registry's lock,
so a lookup sees either the state before a mutation or the state after
it.

Key classes:
    CommandRegistry: Text commands, indexed by name and aliases.
    SlashCommandRegistry: Structured commands, indexed by name only.
"""

from __future__ import annotations

import threading
from typing import Dict, FrozenSet, Generic, List, Optional, Tuple, TypeVar

import structlog

from .exceptions import CommandNotFoundError, DuplicateKeyError, InvalidIndexError
from .models import Command, SlashCommand

logger = structlog.get_logger("cmdclient.registry")

C = TypeVar("C", Command, SlashCommand)


class _IndexedRegistry(Generic[C]):
    """Shared implementation for both registry flavours."""

    kind = "command"

    def __init__(self):
        self._lock = threading.Lock()
        self._commands: List[C] = []
        self._index: Dict[str, int] = {}

    def _keys_for(self, command: C) -> FrozenSet[str]:
        return command.keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return name.lower() in self._index

    def insert(self, command: C, index: Optional[int] = None) -> int:
        """Insert ``command`` at ``index``, shifting later commands up.

        ``index`` None appends. Returns the position the command landed at.

        Raises:
            InvalidIndexError: ``index`` is outside ``[0, len]``.
            DuplicateKeyError: The name or an alias is already indexed.
        """
        keys = self._keys_for(command)
        with self._lock:
            size = len(self._commands)
            if index is None:
                index = size
            if index < 0 or index > size:
                raise InvalidIndexError(index, size, kind=self.kind)
            # Name first so the reported key matches what the caller typed
            for key in sorted(keys, key=lambda k: k != command.name.lower()):
                if key in self._index:
                    raise DuplicateKeyError(key, kind=self.kind)

            if index < size:
                for key, position in self._index.items():
                    if position >= index:
                        self._index[key] = position + 1
            for key in keys:
                self._index[key] = index
            self._commands.insert(index, command)

        logger.debug(
            "registry_command_added",
            kind=self.kind,
            command=command.name,
            index=index,
        )
        return index

    def append(self, command: C) -> int:
        """Add ``command`` at the end of the registry."""
        return self.insert(command, None)

    def remove(self, name: str) -> C:
        """Remove the command owning ``name`` (a name or alias).

        Returns:
            The removed command.

        Raises:
            CommandNotFoundError: ``name`` is not indexed.
        """
        key = name.lower()
        with self._lock:
            position = self._index.get(key)
            if position is None:
                raise CommandNotFoundError(name, kind=self.kind)
            removed = self._commands.pop(position)
            for owned in self._keys_for(removed):
                self._index.pop(owned, None)
            for other, other_position in self._index.items():
                if other_position > position:
                    self._index[other] = other_position - 1

        logger.debug(
            "registry_command_removed",
            kind=self.kind,
            command=removed.name,
            index=position,
        )
        return removed

    def lookup(self, name: str) -> Optional[C]:
        """Return the command owning ``name`` (case-insensitive), or None."""
        with self._lock:
            position = self._index.get(name.lower())
            return self._commands[position] if position is not None else None

    def list(self) -> Tuple[C, ...]:
        """Snapshot of the commands in registry order."""
        with self._lock:
            return tuple(self._commands)

    def index_snapshot(self) -> Dict[str, int]:
        """Copy of the name/alias index. Intended for diagnostics and tests."""
        with self._lock:
            return dict(self._index)


class CommandRegistry(_IndexedRegistry[Command]):
    """Registry of text commands, indexed by name and every alias."""

    kind = "command"


class SlashCommandRegistry(_IndexedRegistry[SlashCommand]):
    """Registry of slash commands, indexed by name only."""

    kind = "slash_command"

    def _keys_for(self, command: SlashCommand) -> FrozenSet[str]:
        return frozenset({command.name.lower()})
