from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from textchan.errors import CollectorError

from .collector import Collector, CollectorResult, EndReason, Predicate

if TYPE_CHECKING:
    from ..channels.base import Channel
    from ..structures.message import Message


class MessageCollector(Collector):
    """Collects ``message`` events created in one channel."""

    event = "message"

    def __init__(self, channel: "Channel", predicate: Predicate, **options: Any) -> None:
        super().__init__(channel.client, channel, predicate, **options)

    def extract(self, message: "Message") -> "Message | None":
        if message.channel.id != self.channel.id:
            return None
        return message


async def await_messages(
    channel: "Channel",
    predicate: Predicate,
    *,
    errors: Iterable[EndReason | str] = (),
    **options: Any,
) -> CollectorResult:
    """
    Collect until the collector ends and return the result.

    If the end reason is listed in ``errors``, raise :class:`CollectorError`
    carrying the result instead of returning it. Unknown reasons raise
    :class:`ValueError` before anything is collected.
    """
    fatal = {EndReason(reason) for reason in errors}
    collector = MessageCollector(channel, predicate, **options)
    result = await collector.wait()
    if result.reason in fatal:
        raise CollectorError(result)
    return result


__all__ = ["MessageCollector", "await_messages"]
