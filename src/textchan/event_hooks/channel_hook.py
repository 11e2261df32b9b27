from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textchan.client import Client

logger = logging.getLogger(__name__)


async def handle_create(client: "Client", payload: dict) -> None:
    channel = client.new_channel(payload)
    if channel is not None:
        client.dispatch("channel_create", channel)


async def handle_delete(client: "Client", payload: dict) -> None:
    """
    Forget a deleted channel.

    Collectors bound to it end with ``channel_gone`` via the dispatched
    ``channel_delete`` event; its typing timers are cancelled and its cache
    released.
    """
    channel = client.channels.pop(int(payload["id"]), None)
    if channel is None:
        return

    channel.deleted = True
    client.dispatch("channel_delete", channel)

    typing = getattr(channel, "_typing", None)
    if typing is not None:
        typing.clear()
    messages = getattr(channel, "messages", None)
    if messages is not None:
        messages.clear()
    logger.info("Channel %s deleted", channel.id)
