"""
Per-channel message cache.

Modules
=======

``message_cache``
    Defines :class:`~textchan.memory.cache.message_cache.MessageCache`, the
    bounded, insertion-ordered ``id -> Message`` mapping every text-based
    channel owns.
"""

from .message_cache import MessageCache

__all__ = ["MessageCache"]
