from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from textchan.structures.message import Message

if TYPE_CHECKING:
    from textchan.client import Client

logger = logging.getLogger(__name__)


async def handle(client: "Client", payload: dict) -> None:
    """
    Handle an incoming message.
    - Cache it on its channel (moves ``last_message_id``)
    - Dispatch ``message`` to listeners, collectors included
    """
    channel = client.get_channel(int(payload["channel_id"]))
    if channel is None or not hasattr(channel, "_cache_message"):
        logger.debug("Message %s for unknown channel %s", payload.get("id"), payload.get("channel_id"))
        return

    message = channel._cache_message(Message.from_data(channel, payload))
    client.dispatch("message", message)
