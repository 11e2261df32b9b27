"""
Generic collector engine.

A :class:`Collector` subscribes to one client event, runs every inbound event
through :meth:`Collector.extract` and its predicate, and accumulates matches
until a stop condition fires:

- ``max_matches`` matches collected          -> :attr:`EndReason.LIMIT`
- ``max_processed`` events seen              -> :attr:`EndReason.PROCESSED_LIMIT`
- no match for ``idle`` seconds              -> :attr:`EndReason.IDLE`
- ``time`` seconds since start               -> :attr:`EndReason.TIME`
- :meth:`Collector.stop` called              -> :attr:`EndReason.CANCELLED`
- the owning channel is deleted              -> :attr:`EndReason.CHANNEL_GONE`

Ending is terminal and idempotent. All state changes happen synchronously
inside the event handler, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, List

from textchan.timers import CancellableTimer

if TYPE_CHECKING:
    from ..channels.base import Channel
    from ..client import Client

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, "Collector"], bool]

_CLOSED = object()


class EndReason(str, enum.Enum):
    LIMIT = "limit"
    PROCESSED_LIMIT = "processed_limit"
    IDLE = "idle"
    TIME = "time"
    CANCELLED = "cancelled"
    CHANNEL_GONE = "channel_gone"


class CollectorState(enum.Enum):
    ACTIVE = "active"
    ENDED = "ended"


@dataclass(frozen=True)
class CollectorResult:
    """Final outcome of a collector: what it gathered and why it stopped."""

    collected: tuple
    reason: EndReason

    def __len__(self) -> int:
        return len(self.collected)

    def __iter__(self):
        return iter(self.collected)


class Collector:
    """Base collector. Subclasses set :attr:`event` and override :meth:`extract`."""

    event: str = ""

    def __init__(
        self,
        client: "Client",
        channel: "Channel",
        predicate: Predicate,
        *,
        max_matches: int | None = None,
        max_processed: int | None = None,
        idle: float | None = None,
        time: float | None = None,
        reset_idle_on_any: bool = False,
    ) -> None:
        if max_matches is not None and max_matches < 1:
            raise ValueError("max_matches must be >= 1")
        if max_processed is not None and max_processed < 1:
            raise ValueError("max_processed must be >= 1")
        if not self.event:
            raise TypeError(f"{type(self).__name__} does not define an event to collect")

        self.client = client
        self.channel = channel
        self.predicate = predicate
        self.max_matches = max_matches
        self.max_processed = max_processed
        self.idle = idle
        self.time = time
        self.reset_idle_on_any = reset_idle_on_any

        self.state = CollectorState.ACTIVE
        self.reason: EndReason | None = None
        self.processed = 0
        self._collected: List[Any] = []
        self._collect_callbacks: List[Callable[[Any, "Collector"], None]] = []
        self._end_callbacks: List[Callable[[CollectorResult], None]] = []
        self._queues: List[asyncio.Queue] = []

        loop = asyncio.get_running_loop()
        self._result: asyncio.Future[CollectorResult] = loop.create_future()
        self._idle_timer: CancellableTimer | None = None
        self._time_timer: CancellableTimer | None = None

        client.add_listener(self.event, self._on_event)
        client.add_listener("channel_delete", self._on_channel_delete)

        if getattr(channel, "deleted", False):
            self.stop(EndReason.CHANNEL_GONE)
            return
        if idle is not None:
            self._idle_timer = CancellableTimer(idle, lambda: self.stop(EndReason.IDLE))
        if time is not None:
            self._time_timer = CancellableTimer(time, lambda: self.stop(EndReason.TIME))

    # ------------------------------------------------------------------ #
    # Event intake
    # ------------------------------------------------------------------ #

    def extract(self, *args: Any) -> Any:
        """Return the item to test from an event payload, or ``None`` to ignore it."""

        raise NotImplementedError

    def _on_event(self, *args: Any) -> None:
        if self.ended:
            return
        item = self.extract(*args)
        if item is None:
            return

        self.processed += 1
        if self.predicate(item, self):
            self._collected.append(item)
            for queue in self._queues:
                queue.put_nowait(item)
            for callback in list(self._collect_callbacks):
                callback(item, self)
            if self.ended:
                return
            if self.max_matches is not None and len(self._collected) >= self.max_matches:
                self.stop(EndReason.LIMIT)
                return
            if self._idle_timer is not None:
                self._idle_timer.reset()
        elif self.reset_idle_on_any and self._idle_timer is not None:
            self._idle_timer.reset()

        if self.max_processed is not None and self.processed >= self.max_processed:
            self.stop(EndReason.PROCESSED_LIMIT)

    def _on_channel_delete(self, channel: "Channel") -> None:
        if channel.id == self.channel.id:
            self.stop(EndReason.CHANNEL_GONE)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @property
    def ended(self) -> bool:
        return self.state is CollectorState.ENDED

    @property
    def collected(self) -> tuple:
        return tuple(self._collected)

    def stop(self, reason: EndReason = EndReason.CANCELLED) -> None:
        """End the collector. A no-op once it has ended."""

        if self.ended:
            return
        self.state = CollectorState.ENDED
        self.reason = reason

        if self._idle_timer is not None:
            self._idle_timer.cancel()
        if self._time_timer is not None:
            self._time_timer.cancel()
        self.client.remove_listener(self.event, self._on_event)
        self.client.remove_listener("channel_delete", self._on_channel_delete)

        result = CollectorResult(collected=tuple(self._collected), reason=reason)
        if not self._result.done():
            self._result.set_result(result)
        for queue in self._queues:
            queue.put_nowait(_CLOSED)

        logger.debug(
            "%s on channel %s ended (%s) with %d item(s)",
            type(self).__name__,
            self.channel.id,
            reason.value,
            len(self._collected),
        )
        for callback in list(self._end_callbacks):
            callback(result)

    cancel = stop

    async def wait(self) -> CollectorResult:
        """Suspend until the collector ends and return its result."""

        return await asyncio.shield(self._result)

    def on_collect(self, callback: Callable[[Any, "Collector"], None]) -> None:
        self._collect_callbacks.append(callback)

    def on_end(self, callback: Callable[[CollectorResult], None]) -> None:
        """Register ``callback`` for the end; runs immediately if already ended."""

        if self.ended:
            callback(self._result.result())
            return
        self._end_callbacks.append(callback)

    async def __aiter__(self) -> AsyncIterator[Any]:
        """Yield matches as they arrive, starting with those already collected."""

        queue: asyncio.Queue = asyncio.Queue()
        for item in self._collected:
            queue.put_nowait(item)
        if self.ended:
            queue.put_nowait(_CLOSED)
        else:
            self._queues.append(queue)
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            if queue in self._queues:
                self._queues.remove(queue)


__all__ = ["Collector", "CollectorResult", "CollectorState", "EndReason"]
