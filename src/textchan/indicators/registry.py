"""
Reference-counted typing indicators for a single channel.

Two kinds of records share the table:

* Our own indicator, created by :meth:`TypingRegistry.start`. The "begin
  typing" request is scheduled as soon as the record appears and always goes
  out, even if the record is stopped before it runs. Once it succeeds a
  refresh task repeats it every ``refresh_interval`` seconds, renewing the
  expiry on each success.
* Other users' indicators, created by :meth:`TypingRegistry.observe` from
  inbound typing events. They never touch the network and lapse after
  ``expiry`` seconds unless observed again.

A record exists iff its refcount is positive. Dropping a record always
cancels its timer and refresh task, never the pending begin request.
Network failures on the typing path are logged and clear the record; they
never reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterator, Set

from textchan.config import indicators as indicator_cfg
from textchan.timers import CancellableTimer, shutdown

logger = logging.getLogger(__name__)

SendTyping = Callable[[], Awaitable[object]]
StopHook = Callable[[int, "TypingRecord"], None]


@dataclass
class TypingRecord:
    """Active typing state for one user."""

    user_id: int
    refcount: int = 1
    # Loop time after which the record lapses without renewal.
    expires_at: float = 0.0
    # True once the indicator is known to be visible.
    active: bool = False
    started_at: float = 0.0
    _expiry: CancellableTimer | None = field(default=None, repr=False)
    _refresh: asyncio.Task | None = field(default=None, repr=False)


class TypingRegistry:
    """Per-channel typing table. Mutated only by the owning channel and its event hooks."""

    def __init__(
        self,
        channel_id: int,
        *,
        send_typing: SendTyping | None = None,
        on_stop: StopHook | None = None,
        expiry: float | None = None,
        refresh_interval: float | None = None,
    ) -> None:
        self.channel_id = channel_id
        self._send_typing = send_typing
        self._on_stop = on_stop
        self.expiry = indicator_cfg.TYPING_EXPIRY if expiry is None else expiry
        self.refresh_interval = (
            indicator_cfg.TYPING_REFRESH_INTERVAL if refresh_interval is None else refresh_interval
        )
        self._records: Dict[int, TypingRecord] = {}
        # Begin requests in flight; held here so they survive their record.
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def start(self, user_id: int, count: int | None = None) -> TypingRecord:
        """
        Register one more ``start`` for ``user_id``.

        The first call creates the record and schedules the only "begin
        typing" request for this absent -> present transition; the request is
        sent even if the record is stopped before the task runs. Later calls bump the refcount, or set it to ``count``
        when given. Must be called with a running event loop.
        """
        if count is not None and count < 1:
            raise ValueError("typing count must be at least 1")

        record = self._records.get(user_id)
        if record is not None:
            record.refcount = count if count is not None else record.refcount + 1
            return record

        loop = asyncio.get_running_loop()
        record = TypingRecord(user_id=user_id, refcount=count or 1, started_at=loop.time())
        self._records[user_id] = record
        self._arm_expiry(record)
        if self._send_typing is not None:
            task = loop.create_task(self._begin_typing(record))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        logger.debug("Typing started for user %s in channel %s", user_id, self.channel_id)
        return record

    def stop(self, user_id: int, force: bool = False) -> bool:
        """
        Register one ``stop`` for ``user_id``; ``force`` clears regardless of refcount.

        Returns ``True`` if a record existed. No network call is made: the
        service lets the indicator lapse on its own.
        """
        record = self._records.get(user_id)
        if record is None:
            return False

        record.refcount = 0 if force else record.refcount - 1
        if record.refcount <= 0:
            self._drop(record)
        return True

    def observe(self, user_id: int) -> TypingRecord:
        """Create or renew another user's indicator from an inbound typing event."""

        record = self._records.get(user_id)
        if record is not None:
            record.active = True
            self._renew(record)
            return record

        loop = asyncio.get_running_loop()
        record = TypingRecord(user_id=user_id, active=True, started_at=loop.time())
        self._records[user_id] = record
        self._arm_expiry(record)
        return record

    def clear(self) -> None:
        """Drop every record, e.g. when the channel is deleted."""

        for record in list(self._records.values()):
            self._drop(record)

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def is_typing(self, user_id: int) -> bool:
        return user_id in self._records

    def count(self, user_id: int) -> int:
        record = self._records.get(user_id)
        return record.refcount if record is not None else 0

    def get(self, user_id: int) -> TypingRecord | None:
        return self._records.get(user_id)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._records))

    # ------------------------------------------------------------------ #
    # Lifecycle internals
    # ------------------------------------------------------------------ #

    def _arm_expiry(self, record: TypingRecord) -> None:
        record._expiry = CancellableTimer(self.expiry, lambda: self._expire(record))
        record.expires_at = record._expiry.deadline or 0.0

    def _renew(self, record: TypingRecord) -> None:
        if record._expiry is None:
            self._arm_expiry(record)
            return
        record._expiry.reset(self.expiry)
        record.expires_at = record._expiry.deadline or 0.0

    def _expire(self, record: TypingRecord) -> None:
        logger.debug("Typing for user %s in channel %s expired", record.user_id, self.channel_id)
        self._drop(record)

    def _drop(self, record: TypingRecord) -> None:
        # A stale record (already replaced or removed) must not evict its successor.
        if self._records.get(record.user_id) is not record:
            return
        del self._records[record.user_id]
        record.refcount = 0

        if record._expiry is not None:
            record._expiry.cancel()
            record._expiry = None
        shutdown(record._refresh)
        record._refresh = None

        if record.active and self._on_stop is not None:
            self._on_stop(record.user_id, record)

    def _fail(self, record: TypingRecord, exc: Exception) -> None:
        logger.warning(
            "Typing request failed in channel %s; clearing indicator: %s",
            self.channel_id,
            exc,
        )
        self._drop(record)

    async def _begin_typing(self, record: TypingRecord) -> None:
        send_typing = self._send_typing
        if send_typing is None:
            return
        try:
            await send_typing()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._fail(record, exc)
            return
        if self._records.get(record.user_id) is not record:
            return
        record.active = True
        self._renew(record)
        record._refresh = asyncio.get_running_loop().create_task(self._refresh_loop(record))

    async def _refresh_loop(self, record: TypingRecord) -> None:
        send_typing = self._send_typing
        if send_typing is None:
            return
        while True:
            await asyncio.sleep(self.refresh_interval)
            if self._records.get(record.user_id) is not record:
                return
            try:
                await send_typing()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Detach first so _drop does not try to cancel the running task.
                record._refresh = None
                self._fail(record, exc)
                return
            if self._records.get(record.user_id) is not record:
                return
            record.active = True
            self._renew(record)


__all__ = ["TypingRecord", "TypingRegistry"]
