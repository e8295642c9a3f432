"""Command client core for chat bots.

Resolves prefixes, looks up commands in thread-safe registries, tracks
cooldowns and usage, and links responses to their triggering messages
for cascading deletion.
"""

from .config import MENTION_PREFIX, Config, get_config
from .cooldowns import CooldownSweeper, CooldownTracker
from .events import (
    ChannelType,
    CommandEvent,
    MessageDeleteEvent,
    MessageEvent,
    SlashCommandEvent,
)
from .exceptions import (
    CommandClientError,
    CommandNotFoundError,
    ConfigurationError,
    DuplicateKeyError,
    InvalidIndexError,
    RegistryError,
)
from .links import LinkCache
from .listener import CommandListener
from .models import Category, Command, SlashCommand
from .prefix import PrefixMatch, PrefixResolver
from .registry import CommandRegistry, SlashCommandRegistry
from .router import EventRouter, RouteOutcome
from .usage import UsageCounter

__all__ = [
    "Category",
    "ChannelType",
    "Command",
    "CommandClientError",
    "CommandEvent",
    "CommandListener",
    "CommandNotFoundError",
    "CommandRegistry",
    "Config",
    "ConfigurationError",
    "CooldownSweeper",
    "CooldownTracker",
    "DuplicateKeyError",
    "EventRouter",
    "InvalidIndexError",
    "LinkCache",
    "MENTION_PREFIX",
    "MessageDeleteEvent",
    "MessageEvent",
    "PrefixMatch",
    "PrefixResolver",
    "RegistryError",
    "RouteOutcome",
    "SlashCommand",
    "SlashCommandEvent",
    "SlashCommandRegistry",
    "UsageCounter",
    "get_config",
]
