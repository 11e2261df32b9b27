"""
Channel-local message cache.

:class:`MessageCache` wraps an insertion-ordered dict of messages for a single
channel:
    - First key = oldest stored message
    - Last key  = newest stored message

Storing past capacity evicts the oldest entry. Eviction is purely a memory
bound and never touches the network. Storing also moves the owning channel's
``last_message_id`` pointer, so channels should only write through
:meth:`MessageCache.store`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List

if TYPE_CHECKING:
    from ...channels.base import Channel
    from ...structures.message import Message

logger = logging.getLogger(__name__)


class MessageCache:
    """
    Bounded message store for one channel.

    Storing a message sets ``channel.last_message_id`` to its id unless the
    pointer already holds a newer one: caching an older, fetched message
    leaves the pointer where it is.
    """

    def __init__(self, channel: "Channel", maxlen: int | None = None) -> None:
        self.channel = channel
        # ``None`` or negative: unbounded. ``0``: keep nothing.
        self.maxlen = None if maxlen is None or maxlen < 0 else maxlen
        self._messages: dict[int, "Message"] = {}

    def store(self, message: "Message") -> int | None:
        """Insert or overwrite ``message`` by id, returning any evicted id."""

        # Snowflakes grow over time, so the newest id is the last message.
        current = getattr(self.channel, "last_message_id", None)
        if current is None or message.id >= current:
            self.channel.last_message_id = message.id
        if self.maxlen == 0:
            return None

        # Overwrites keep their original position; only new ids count toward capacity.
        self._messages[message.id] = message

        evicted_id: int | None = None
        if self.maxlen is not None and len(self._messages) > self.maxlen:
            evicted_id = next(iter(self._messages))
            del self._messages[evicted_id]
            logger.debug(
                "Evicted msg %s from channel %s cache (maxlen=%s)",
                evicted_id,
                self.channel.id,
                self.maxlen,
            )
        return evicted_id

    def get(self, message_id: int) -> "Message | None":
        """Return the cached message or ``None``; never fetches."""

        return self._messages.get(message_id)

    def remove(self, message_id: int) -> "Message | None":
        return self._messages.pop(message_id, None)

    def clear(self) -> None:
        self._messages.clear()

    def values(self, limit: int | None = None) -> List["Message"]:
        """Return up to ``limit`` newest messages ordered oldest -> newest."""

        if limit is None:
            return list(self._messages.values())
        if limit < 0:
            raise ValueError("limit must be >= 0 or None")
        if limit >= len(self._messages):
            return list(self._messages.values())
        return list(self._messages.values())[len(self._messages) - limit :]

    def ids(self) -> List[int]:
        """Return cached message ids ordered oldest -> newest."""

        return list(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator["Message"]:
        return iter(list(self._messages.values()))
