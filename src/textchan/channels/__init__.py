"""
Channel variants and the shared text-based capability.

``capability``
    :class:`~textchan.channels.capability.TextBasedCapability` and the
    ``text_based`` class decorator that installs send/fetch/search/typing/
    collector operations onto a variant.
``dm``, ``group``, ``text``
    The direct-message, group direct-message and guild text variants.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from .base import Channel, ChannelType
from .capability import TextBasedCapability, supports, text_based
from .dm import DMChannel
from .group import GroupDMChannel
from .text import TextChannel

if TYPE_CHECKING:
    from ..client import Client

CHANNEL_CLASSES: Dict[int, Type[Channel]] = {
    ChannelType.TEXT: TextChannel,
    ChannelType.DM: DMChannel,
    ChannelType.GROUP_DM: GroupDMChannel,
}


def create_channel(client: "Client", data: dict) -> Channel | None:
    """Build the variant matching ``data["type"]``, or ``None`` for unsupported types."""

    cls = CHANNEL_CLASSES.get(int(data.get("type", -1)))
    if cls is None:
        return None
    return cls(client, data)


__all__ = [
    "Channel",
    "ChannelType",
    "DMChannel",
    "GroupDMChannel",
    "TextChannel",
    "TextBasedCapability",
    "text_based",
    "supports",
    "create_channel",
    "CHANNEL_CLASSES",
]
