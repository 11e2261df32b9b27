"""
Asyncio channel layer for a real-time chat service.

``client``
    :class:`~textchan.client.Client`, the facade owning REST access, identity
    maps and the event stream.
``channels``
    Channel variants sharing the text-based capability.
``collectors``
    Predicate-filtered, time-boxed event collection.
``indicators``
    Reference-counted typing indicators.
``memory.cache``
    Bounded per-channel message cache.
"""

from .client import Client
from .channels import Channel, ChannelType, DMChannel, GroupDMChannel, TextChannel
from .collectors import Collector, CollectorResult, EndReason, MessageCollector
from .errors import CollectorError, HTTPError, TextChanError, UnsupportedOperationError
from .structures import Message, SearchResult, User, Webhook

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Channel",
    "ChannelType",
    "DMChannel",
    "GroupDMChannel",
    "TextChannel",
    "Collector",
    "CollectorResult",
    "EndReason",
    "MessageCollector",
    "CollectorError",
    "HTTPError",
    "TextChanError",
    "UnsupportedOperationError",
    "Message",
    "SearchResult",
    "User",
    "Webhook",
]
