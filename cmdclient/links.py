"""Links between triggering messages and the bot's responses.

When a user deletes the message that invoked a command, the responses
the bot posted for it can be deleted too. LinkCache remembers which
responses belong to which source message, for a bounded number of
source messages; the oldest-inserted source is forgotten first.
"""

import threading
from collections import OrderedDict
from typing import FrozenSet, Iterable, Optional, Protocol, Set

import structlog

logger = structlog.get_logger("cmdclient.links")


class LinkCache:
    """Fixed-capacity FIFO map of source message id to response ids.

    Args:
        capacity: Maximum number of source ids kept. 0 disables the
            cache: ``link`` does nothing and nothing is stored.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError("LinkCache capacity must be >= 0")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._links: "Optional[OrderedDict[str, Set[str]]]" = (
            OrderedDict() if capacity > 0 else None
        )

    @property
    def enabled(self) -> bool:
        return self._links is not None

    def __len__(self) -> int:
        if self._links is None:
            return 0
        with self._lock:
            return len(self._links)

    def contains(self, source_id: str) -> bool:
        if self._links is None:
            return False
        with self._lock:
            return source_id in self._links

    def link(self, source_id: str, response_id: str) -> None:
        """Record ``response_id`` as a response to ``source_id``.

        Adding to a known source keeps its insertion position. A new
        source evicts the oldest one when the cache is full.
        """
        if self._links is None:
            return
        with self._lock:
            stored = self._links.get(source_id)
            if stored is not None:
                stored.add(response_id)
                return
            if len(self._links) >= self.capacity:
                evicted, _ = self._links.popitem(last=False)
                logger.debug("link_evicted", source_id=evicted)
            self._links[source_id] = {response_id}

    def consume(self, source_id: str) -> FrozenSet[str]:
        """Remove and return the response ids linked to ``source_id``.

        Returns an empty set for unknown sources.
        """
        if self._links is None:
            return frozenset()
        with self._lock:
            return frozenset(self._links.pop(source_id, ()))


class MessageDeleter(Protocol):
    """Transport capability used for cascading deletion."""

    def delete_message(self, channel_id: Optional[str], message_id: str) -> None:
        ...

    def delete_messages(self, channel_id: Optional[str], message_ids: Iterable[str]) -> None:
        ...


def delete_linked(
    cache: LinkCache,
    source_id: str,
    deleter: MessageDeleter,
    channel_id: Optional[str] = None,
    can_bulk_delete: bool = False,
) -> int:
    """Delete every response linked to ``source_id``, best-effort.

    Uses one bulk delete when there is more than one response and the
    bot may bulk-delete, otherwise one delete per response. Deletion
    failures are logged and ignored.

    Returns:
        Number of response ids that were linked.
    """
    response_ids = cache.consume(source_id)
    if not response_ids:
        return 0

    if len(response_ids) > 1 and can_bulk_delete:
        try:
            deleter.delete_messages(channel_id, sorted(response_ids))
        except Exception as e:
            logger.warning(
                "linked_bulk_delete_failed",
                source_id=source_id,
                count=len(response_ids),
                error=str(e),
            )
    else:
        for response_id in sorted(response_ids):
            try:
                deleter.delete_message(channel_id, response_id)
            except Exception as e:
                logger.warning(
                    "linked_delete_failed",
                    source_id=source_id,
                    response_id=response_id,
                    error=str(e),
                )
    return len(response_ids)
