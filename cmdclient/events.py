"""Inbound event shapes and the command invocation context.

The transport adapter converts platform events into these models
before handing them to the router. Only the fields routing needs are
modelled; anything else the integrator wants travels in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .router import EventRouter


class ChannelType(str, Enum):
    """Kind of context a message was posted in."""
    PRIVATE = "private"
    GUILD = "guild"
    OTHER = "other"


class MessageEvent(BaseModel):
    """A text message received by the bot."""

    message_id: str
    author_id: str
    content: str = Field(..., description="Raw message text, mentions unresolved")
    author_is_bot: bool = False
    channel_type: ChannelType = ChannelType.GUILD
    channel_id: Optional[str] = None
    guild_id: Optional[str] = None
    self_mention_forms: List[str] = Field(
        default_factory=list,
        description="Raw forms of the bot's own mention, e.g. '<@123>' and '<@!123>'",
    )
    can_talk: bool = Field(True, description="Whether the bot may post in this channel")
    extra: Dict[str, Any] = Field(default_factory=dict)

    def is_from_type(self, channel_type: ChannelType) -> bool:
        return self.channel_type == channel_type


class SlashCommandEvent(BaseModel):
    """A structured command interaction. The command name is exact."""

    name: str
    user_id: str
    channel_id: Optional[str] = None
    guild_id: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    extra: Dict[str, Any] = Field(default_factory=dict)


class MessageDeleteEvent(BaseModel):
    """A message was deleted in a guild channel."""

    message_id: str
    channel_id: Optional[str] = None
    guild_id: Optional[str] = None
    can_bulk_delete: bool = Field(
        False, description="Whether the bot may bulk-delete in this channel"
    )


@dataclass
class CommandEvent:
    """Context passed to a text command's handler.

    Attributes:
        event: The original message event.
        prefix: The exact prefix text that matched, for echoing back.
        args: Everything after the command name, possibly empty.
        client: The router that dispatched the command.
    """

    event: MessageEvent
    prefix: str
    args: str
    client: "EventRouter"

    @property
    def author_id(self) -> str:
        return self.event.author_id

    @property
    def is_owner(self) -> bool:
        """Whether the author is the configured owner or a co-owner."""
        return self.client.is_owner(self.event.author_id)

    def link_response(self, response_id: str) -> None:
        """Link a response message to the triggering message."""
        self.client.link_ids(self.event.message_id, response_id)


# ---------------------------------------------------------------------------
# Slash command option helpers
# ---------------------------------------------------------------------------

def has_option(event: SlashCommandEvent, option: str) -> bool:
    return option in event.options and event.options[option] is not None


def opt_string(event: SlashCommandEvent, option: str, default: Optional[str] = None) -> Optional[str]:
    """Return the option as a string, or ``default`` if it is absent."""
    if not has_option(event, option):
        return default
    return str(event.options[option])


def opt_bool(event: SlashCommandEvent, option: str, default: bool = False) -> bool:
    if not has_option(event, option):
        return default
    value = event.options[option]
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


def opt_int(event: SlashCommandEvent, option: str, default: int = 0) -> int:
    """Return the option as an int, or ``default`` if absent.

    Raises ValueError when the option is present but not numeric.
    """
    if not has_option(event, option):
        return default
    return int(event.options[option])


def opt_float(event: SlashCommandEvent, option: str, default: float = 0.0) -> float:
    if not has_option(event, option):
        return default
    return float(event.options[option])
