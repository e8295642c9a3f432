"""Listener hooks for observing the router.

Subclass CommandListener and override the methods you need, then pass
an instance to ``EventRouter.listener``. Every hook is optional and runs
synchronously on the thread that is routing the event.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .events import CommandEvent, MessageEvent, SlashCommandEvent
    from .models import Command, SlashCommand


class CommandListener:
    """Base class for router listeners. All hooks are no-ops."""

    def on_command(self, event: "CommandEvent", command: Optional["Command"]) -> None:
        """Called before a command runs. ``command`` is None for the help word."""

    def on_completed_command(self, event: "CommandEvent", command: Optional["Command"]) -> None:
        """Called after a command or the help consumer returns normally."""

    def on_slash_command(self, event: "SlashCommandEvent", command: "SlashCommand") -> None:
        """Called before a slash command runs."""

    def on_non_command_message(self, event: "MessageEvent") -> None:
        """Called for every message that did not invoke a command."""
