"""
Timer and task helpers shared by typing indicators and collectors.

Every timer created through :class:`CancellableTimer` must be paired with a
:meth:`~CancellableTimer.cancel` on the owner's teardown path, and every task
started for background work is torn down with :func:`shutdown`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class CancellableTimer:
    """One-shot callback scheduled on the running loop, resettable until it fires."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self._loop = asyncio.get_running_loop()
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.deadline: float | None = None
        self._arm(delay)

    def _arm(self, delay: float) -> None:
        self.deadline = self._loop.time() + delay
        self._handle = self._loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self._callback()

    @property
    def active(self) -> bool:
        return self._handle is not None

    def reset(self, delay: float | None = None) -> None:
        """Push the deadline out to ``delay`` (default: the original delay) from now."""

        if self._handle is not None:
            self._handle.cancel()
        self._arm(self._delay if delay is None else delay)

    def cancel(self) -> None:
        """Cancel the pending callback. Safe to call repeatedly or after firing."""

        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def shutdown(task: asyncio.Task | None) -> None:
    """
    Cancel a background task without waiting for it.

    Tolerant of ``None``, finished tasks, and of being called from inside the
    task itself (the current task is never cancelled from within).
    """

    if task is None or task.done():
        return
    try:
        current = asyncio.current_task()
    except RuntimeError:
        current = None
    if task is current:
        return
    task.cancel()


__all__ = ["CancellableTimer", "shutdown"]
