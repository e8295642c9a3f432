"""Prefix resolution for text commands.

Decides whether a raw message starts with one of the configured
prefixes and, if so, where the command text begins. Sources are tried
in a fixed order and the first match wins:

1. the bot's own mention, when the default or alternate prefix is the
   mention sentinel;
2. the custom prefix function (exact, case-sensitive);
3. the default prefix;
4. the alternate prefix;
5. the static prefixes, in order;
6. the guild's dynamic prefixes, in order (guild messages only).

Sources 3-6 compare case-insensitively.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import MENTION_PREFIX
from .events import ChannelType, MessageEvent

PrefixFunction = Callable[[MessageEvent], Optional[str]]
GuildPrefixSource = Callable[[MessageEvent], Optional[Iterable[str]]]

_WHITESPACE = re.compile(r"\s+")


def split_remainder(remainder: str) -> Tuple[str, str]:
    """Split text after a prefix into ``(name, args)``.

    The remainder is trimmed, then split on the first whitespace run.
    An empty remainder yields ``("", "")``.
    """
    parts = _WHITESPACE.split(remainder.strip(), maxsplit=1)
    name = parts[0]
    args = parts[1] if len(parts) > 1 else ""
    return name, args


@dataclass(frozen=True)
class PrefixMatch:
    """Result of a successful prefix resolution.

    Attributes:
        prefix: The exact raw text that matched.
        end: Index in the raw text where the remainder begins.
    """

    prefix: str
    end: int

    def split(self, content: str) -> Tuple[str, str]:
        """Return ``(name, args)`` for the text after this prefix."""
        return split_remainder(content[self.end:])


def _starts_with_ignore_case(content: str, prefix: str) -> bool:
    return content[:len(prefix)].lower() == prefix.lower()


class PrefixResolver:
    """Matches raw message text against the configured prefix sources.

    Args:
        prefix: Default prefix. Empty or None means the mention sentinel.
        alt_prefix: Optional alternate prefix.
        prefixes: Optional static prefixes, checked in order.
        prefix_function: Optional callable returning a prefix for the
            event. Trusted to normalise case itself.
        guild_prefixes: Optional callable returning the dynamic prefixes
            configured for the event's guild.
    """

    def __init__(
        self,
        prefix: Optional[str] = None,
        alt_prefix: Optional[str] = None,
        prefixes: Optional[Sequence[str]] = None,
        prefix_function: Optional[PrefixFunction] = None,
        guild_prefixes: Optional[GuildPrefixSource] = None,
    ):
        self.prefix: str = prefix or MENTION_PREFIX
        self.alt_prefix: Optional[str] = alt_prefix or None
        self.prefixes: List[str] = [p for p in (prefixes or []) if p]
        self.prefix_function = prefix_function
        self.guild_prefixes = guild_prefixes

    @property
    def uses_mention(self) -> bool:
        """Whether the bot's own mention acts as a prefix."""
        return self.prefix == MENTION_PREFIX or self.alt_prefix == MENTION_PREFIX

    def resolve(self, event: MessageEvent) -> Optional[PrefixMatch]:
        """Return the first matching prefix for ``event``, or None."""
        content = event.content

        if self.uses_mention:
            for form in event.self_mention_forms:
                if form and content.startswith(form):
                    return PrefixMatch(prefix=form, end=len(form))

        if self.prefix_function is not None:
            custom = self.prefix_function(event)
            if custom and content.startswith(custom):
                return PrefixMatch(prefix=custom, end=len(custom))

        candidates: List[str] = []
        if self.prefix != MENTION_PREFIX:
            candidates.append(self.prefix)
        if self.alt_prefix is not None and self.alt_prefix != MENTION_PREFIX:
            candidates.append(self.alt_prefix)
        candidates.extend(self.prefixes)

        match = self._match_any(content, candidates)
        if match is not None:
            return match

        if self.guild_prefixes is not None and event.is_from_type(ChannelType.GUILD):
            dynamic = self.guild_prefixes(event)
            if dynamic:
                return self._match_any(content, dynamic)

        return None

    @staticmethod
    def _match_any(content: str, candidates: Iterable[str]) -> Optional[PrefixMatch]:
        for candidate in candidates:
            if candidate and _starts_with_ignore_case(content, candidate):
                return PrefixMatch(prefix=content[:len(candidate)], end=len(candidate))
        return None
