"""
Typing indicator bookkeeping.

``registry``
    Defines :class:`~textchan.indicators.registry.TypingRegistry`, the
    per-channel ``user id -> TypingRecord`` table with reference counting,
    expiry timers and the best-effort refresh task for our own indicator.
"""

from .registry import TypingRecord, TypingRegistry

__all__ = ["TypingRecord", "TypingRegistry"]
