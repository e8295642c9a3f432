"""Event router for text and slash commands.

Turns one inbound event into at most one command invocation. A text
message goes through these steps:

    bot author?            -> REJECTED
    no prefix match        -> NO_MATCH
    help word              -> HELP (help consumer, registry untouched)
    cannot talk in channel -> NO_MATCH
    unknown command        -> NO_MATCH
    otherwise              -> COMMAND

Every NO_MATCH is reported to ``listener.on_non_command_message``.
Slash events skip prefix and help handling and go straight to the slash
registry.

Key classes:
    EventRouter: Owns the registries, trackers and link cache and
        exposes the administrative operations on them.
    RouteOutcome: Terminal state reached for one event.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import structlog

from .config import DEFAULT_HELP_WORD, MENTION_PREFIX, Config, is_safe_id
from .cooldowns import CooldownTracker
from .events import ChannelType, CommandEvent, MessageDeleteEvent, MessageEvent, SlashCommandEvent
from .links import LinkCache, MessageDeleter, delete_linked
from .listener import CommandListener
from .models import Command, SlashCommand
from .prefix import GuildPrefixSource, PrefixFunction, PrefixResolver
from .registry import CommandRegistry, SlashCommandRegistry
from .usage import UsageCounter

logger = structlog.get_logger("cmdclient.router")

HelpConsumer = Callable[[CommandEvent], None]
PreProcess = Callable[[MessageEvent], bool]


class RouteOutcome(str, Enum):
    """Terminal state reached while routing one event."""
    REJECTED = "rejected"
    NO_MATCH = "no_match"
    HELP = "help"
    COMMAND = "command"


class EventRouter:
    """Routes inbound events to registered commands.

    Registries, trackers and the link cache may be injected; otherwise
    fresh ones are created. Each guards itself with its own lock, so the
    router can be shared by any number of delivery threads while
    commands are added or removed from another.

    Args:
        owner_id: Platform id of the bot owner. Unsafe ids are logged,
            not rejected.
        co_owner_ids: Additional owner ids.
        prefix: Default prefix; None or empty means the mention sentinel.
        alt_prefix: Optional alternate prefix.
        prefixes: Optional static prefixes.
        prefix_function: Optional per-event prefix callable.
        guild_prefixes: Optional per-guild dynamic prefix source.
        help_word: Word that triggers ``help_consumer``.
        use_help: Whether the help word is intercepted at all.
        help_consumer: Callable rendering help for a CommandEvent. The
            help word is only intercepted when one is supplied.
        pre_process: Predicate over the raw event; returning False
            suppresses the handler but still counts as handled.
        linked_cache_size: Capacity of the link cache (0 disables).
        commands: Text commands registered in order at construction.
        slash_commands: Slash commands registered in order at construction.
    """

    def __init__(
        self,
        owner_id: Optional[str] = None,
        *,
        co_owner_ids: Optional[Sequence[str]] = None,
        prefix: Optional[str] = None,
        alt_prefix: Optional[str] = None,
        prefixes: Optional[Sequence[str]] = None,
        prefix_function: Optional[PrefixFunction] = None,
        guild_prefixes: Optional[GuildPrefixSource] = None,
        help_word: str = DEFAULT_HELP_WORD,
        use_help: bool = True,
        help_consumer: Optional[HelpConsumer] = None,
        pre_process: Optional[PreProcess] = None,
        linked_cache_size: int = 0,
        commands: Iterable[Command] = (),
        slash_commands: Iterable[SlashCommand] = (),
        registry: Optional[CommandRegistry] = None,
        slash_registry: Optional[SlashCommandRegistry] = None,
        cooldowns: Optional[CooldownTracker] = None,
        usage: Optional[UsageCounter] = None,
        links: Optional[LinkCache] = None,
    ):
        if owner_id is None:
            logger.warning("owner_id_missing", msg="Owner-only commands will be unusable")
        elif not is_safe_id(owner_id):
            logger.warning(
                "owner_id_unsafe",
                owner_id=owner_id,
                msg="Make sure the id is a non-negative long",
            )
        for co_owner in co_owner_ids or ():
            if not is_safe_id(co_owner):
                logger.warning(
                    "co_owner_id_unsafe",
                    co_owner_id=co_owner,
                    msg="Make sure the id is a non-negative long",
                )

        self.start_time = datetime.now(timezone.utc)
        self.owner_id = str(owner_id) if owner_id is not None else None
        self.co_owner_ids: Tuple[str, ...] = tuple(str(i) for i in co_owner_ids or ())

        self.resolver = PrefixResolver(
            prefix=prefix,
            alt_prefix=alt_prefix,
            prefixes=prefixes,
            prefix_function=prefix_function,
            guild_prefixes=guild_prefixes,
        )
        self.text_prefix: Optional[str] = prefix or None
        self.help_word = help_word or DEFAULT_HELP_WORD
        self.use_help = use_help
        self.help_consumer = help_consumer
        self.pre_process: PreProcess = pre_process or (lambda event: True)

        self.registry = registry if registry is not None else CommandRegistry()
        self.slash_registry = slash_registry if slash_registry is not None else SlashCommandRegistry()
        self.cooldowns = cooldowns if cooldowns is not None else CooldownTracker()
        self.usage = usage if usage is not None else UsageCounter()
        self.links = links if links is not None else LinkCache(linked_cache_size)

        self._listener: Optional[CommandListener] = None

        for command in commands:
            self.add_command(command)
        for slash_command in slash_commands:
            self.add_slash_command(slash_command)

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "EventRouter":
        """Build a router from the ``commands`` section of ``config``.

        Callables (prefix_function, help_consumer, pre_process, ...) and
        initial commands are passed through ``kwargs``, which also
        override any configured value.
        """
        options = dict(
            owner_id=config.owner_id,
            co_owner_ids=config.co_owner_ids,
            prefix=config.prefix,
            alt_prefix=config.alt_prefix,
            prefixes=config.prefixes,
            help_word=config.help_word,
            use_help=config.use_help,
            linked_cache_size=config.linked_cache_size,
        )
        options.update(kwargs)
        return cls(**options)

    # --- Listener ---

    @property
    def listener(self) -> Optional[CommandListener]:
        return self._listener

    @listener.setter
    def listener(self, listener: Optional[CommandListener]) -> None:
        self._listener = listener

    # --- Properties ---

    @property
    def prefix(self) -> str:
        return self.resolver.prefix

    @property
    def alt_prefix(self) -> Optional[str]:
        return self.resolver.alt_prefix

    @property
    def prefixes(self) -> List[str]:
        return list(self.resolver.prefixes)

    @property
    def commands(self) -> Tuple[Command, ...]:
        return self.registry.list()

    @property
    def slash_commands(self) -> Tuple[SlashCommand, ...]:
        return self.slash_registry.list()

    @property
    def uses_linked_deletion(self) -> bool:
        return self.links.enabled

    def is_owner(self, user_id: str) -> bool:
        user_id = str(user_id)
        return user_id == self.owner_id or user_id in self.co_owner_ids

    # --- Administrative operations ---

    def add_command(self, command: Command, index: Optional[int] = None) -> None:
        """Register ``command`` at ``index`` (default: the end).

        Raises:
            InvalidIndexError: ``index`` is outside ``[0, len]``.
            DuplicateKeyError: Name or alias already registered.
        """
        self.registry.insert(command, index)

    def remove_command(self, name: str) -> Command:
        """Unregister the command owning ``name`` (a name or alias).

        Raises:
            CommandNotFoundError: ``name`` is not registered.
        """
        return self.registry.remove(name)

    def add_slash_command(self, command: SlashCommand, index: Optional[int] = None) -> None:
        self.slash_registry.insert(command, index)

    def remove_slash_command(self, name: str) -> SlashCommand:
        return self.slash_registry.remove(name)

    def get_cooldown(self, key: str) -> Optional[datetime]:
        """Expiry time stored for ``key``, or None."""
        expires_at = self.cooldowns.get(key)
        if expires_at is None:
            return None
        return datetime.fromtimestamp(expires_at, tz=timezone.utc)

    def get_remaining_cooldown(self, key: str) -> int:
        return self.cooldowns.remaining(key)

    def apply_cooldown(self, key: str, seconds: float) -> None:
        self.cooldowns.apply(key, seconds)

    def clean_cooldowns(self) -> int:
        return self.cooldowns.sweep()

    def get_command_uses(self, command: Union[Command, SlashCommand, str]) -> int:
        name = command if isinstance(command, str) else command.name
        return self.usage.get(name)

    def link_ids(self, source_id: str, response_id: str) -> None:
        """Link a response message to the message that triggered it."""
        self.links.link(source_id, response_id)

    # --- Lifecycle ---

    def on_ready(self, self_name: str, is_bot: bool = True) -> bool:
        """Record the bot's identity once the transport has connected.

        Sets ``text_prefix`` to ``"@<name> "`` when the mention sentinel
        is the default prefix. User (non-bot) accounts are not supported.

        Returns:
            False if the account is not a bot account.
        """
        if not is_bot:
            logger.error("client_account_unsupported", name=self_name)
            return False
        if self.resolver.prefix == MENTION_PREFIX:
            self.text_prefix = f"@{self_name} "
        else:
            self.text_prefix = self.resolver.prefix
        logger.info("router_ready", name=self_name, text_prefix=self.text_prefix)
        return True

    # --- Routing ---

    def on_message(self, event: MessageEvent) -> RouteOutcome:
        """Route one text message. See the module docstring."""
        if event.author_is_bot:
            return RouteOutcome.REJECTED

        match = self.resolver.resolve(event)
        if match is not None:
            name, args = match.split(event.content)

            if (
                self.use_help
                and self.help_consumer is not None
                and name.lower() == self.help_word.lower()
            ):
                cevent = CommandEvent(event=event, prefix=match.prefix, args=args, client=self)
                listener = self._listener
                if listener is not None:
                    listener.on_command(cevent, None)
                self.help_consumer(cevent)
                if listener is not None:
                    listener.on_completed_command(cevent, None)
                return RouteOutcome.HELP

            if event.is_from_type(ChannelType.PRIVATE) or event.can_talk:
                command = self.registry.lookup(name) if name else None
                if command is not None:
                    cevent = CommandEvent(event=event, prefix=match.prefix, args=args, client=self)
                    self._dispatch(cevent, command)
                    return RouteOutcome.COMMAND
            else:
                logger.debug(
                    "router_cannot_talk",
                    channel_id=event.channel_id,
                    command=name,
                )

        listener = self._listener
        if listener is not None:
            listener.on_non_command_message(event)
        return RouteOutcome.NO_MATCH

    def _dispatch(self, cevent: CommandEvent, command: Command) -> None:
        listener = self._listener
        if listener is not None:
            listener.on_command(cevent, command)
        self.usage.increment(command.name)

        if not self.pre_process(cevent.event):
            logger.debug(
                "command_suppressed_by_pre_process",
                command=command.name,
                message_id=cevent.event.message_id,
            )
            return

        try:
            command.run(cevent)
        except Exception as e:
            logger.error(
                "command_failed",
                command=command.name,
                message_id=cevent.event.message_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        if listener is not None:
            listener.on_completed_command(cevent, command)

    def on_slash_command(self, event: SlashCommandEvent) -> RouteOutcome:
        """Route one slash command interaction."""
        command = self.slash_registry.lookup(event.name)
        if command is None:
            logger.debug("slash_command_unknown", name=event.name)
            return RouteOutcome.NO_MATCH

        listener = self._listener
        if listener is not None:
            listener.on_slash_command(event, command)
        self.usage.increment(command.name)
        try:
            command.run(event, self)
        except Exception as e:
            logger.error(
                "slash_command_failed",
                command=command.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        return RouteOutcome.COMMAND

    def on_message_delete(self, event: MessageDeleteEvent, deleter: MessageDeleter) -> int:
        """Delete the bot's responses to a deleted message, best-effort.

        Returns:
            Number of linked responses found (0 when linking is disabled).
        """
        if not self.links.enabled:
            return 0
        return delete_linked(
            self.links,
            event.message_id,
            deleter,
            channel_id=event.channel_id,
            can_bulk_delete=event.can_bulk_delete,
        )
