"""Command descriptors.

A Command is an immutable description of something the router can
dispatch to: its names, help metadata and an opaque handler. The
router only ever calls ``run``; it never looks inside the handler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Iterable, Optional

if TYPE_CHECKING:
    from .events import CommandEvent, SlashCommandEvent


@dataclass(frozen=True)
class Category:
    """Grouping tag for commands.

    Attributes:
        name: Display name of the category.
        predicate: Optional check an integrator may apply before running
            a command of this category. The router does not call it.
    """

    name: str
    predicate: Optional[Callable[["CommandEvent"], bool]] = field(
        default=None, compare=False, repr=False
    )


def _normalize_aliases(aliases: Iterable[str]) -> FrozenSet[str]:
    if isinstance(aliases, str):
        return frozenset((aliases,))
    return frozenset(aliases)


@dataclass(frozen=True)
class Command:
    """A text command.

    Names and aliases are matched case-insensitively by the registry;
    they are stored as given so help output keeps the author's casing.

    Args:
        name: Primary name, unique across the registry.
        handler: Callable invoked with the CommandEvent on dispatch.
        aliases: Additional names, each unique across the registry.
        category: Optional grouping tag.
        hidden: Excluded from help listings.
        owner_command: Only meant for the bot owner.
        arguments: Usage hint for the arguments, e.g. ``"<user> [reason]"``.
        help: One-line description.
    """

    name: str
    handler: Callable[["CommandEvent"], Any] = field(compare=False, repr=False)
    aliases: FrozenSet[str] = frozenset()
    category: Optional[Category] = None
    hidden: bool = False
    owner_command: bool = False
    arguments: Optional[str] = None
    help: str = "no help available"

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Command name must be a non-empty string")
        object.__setattr__(self, "aliases", _normalize_aliases(self.aliases))

    @property
    def keys(self) -> FrozenSet[str]:
        """Lowercased name and aliases, as indexed by the registry."""
        return frozenset({self.name.lower(), *(a.lower() for a in self.aliases)})

    def run(self, event: "CommandEvent") -> Any:
        """Execute the command. Subclasses may override."""
        return self.handler(event)


@dataclass(frozen=True)
class SlashCommand:
    """A structured (slash) command. No aliases.

    Args:
        name: Name, unique across the slash registry.
        handler: Callable invoked with ``(event, client)`` on dispatch.
        help: One-line description.
        guild_only: Only usable inside a guild.
        guild_id: Guild the command is scoped to, if any.
    """

    name: str
    handler: Callable[["SlashCommandEvent", Any], Any] = field(compare=False, repr=False)
    help: str = "no help available"
    guild_only: bool = False
    guild_id: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("SlashCommand name must be a non-empty string")

    @property
    def keys(self) -> FrozenSet[str]:
        return frozenset({self.name.lower()})

    def run(self, event: "SlashCommandEvent", client: Any) -> Any:
        """Execute the command. Subclasses may override."""
        return self.handler(event, client)
