"""
Event collectors.

``collector``
    :class:`~textchan.collectors.collector.Collector`, the generic
    predicate-filtered, time-boxed subscription over client events, plus
    :class:`CollectorResult` and :class:`EndReason`.
``message_collector``
    :class:`~textchan.collectors.message_collector.MessageCollector`, which
    narrows the generic engine to ``message`` events for one channel, and the
    one-shot :func:`await_messages` helper.
"""

from .collector import Collector, CollectorResult, CollectorState, EndReason
from .message_collector import MessageCollector, await_messages

__all__ = [
    "Collector",
    "CollectorResult",
    "CollectorState",
    "EndReason",
    "MessageCollector",
    "await_messages",
]
