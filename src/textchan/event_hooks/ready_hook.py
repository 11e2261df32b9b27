from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textchan.client import Client

logger = logging.getLogger(__name__)


async def handle(client: "Client", payload: dict) -> None:
    """Record our own user and seed the private channels sent with READY."""

    client.user = client.new_user(payload["user"])
    for data in payload.get("private_channels", []):
        client.new_channel(data)

    logger.info(
        "Ready as %s (ID: %s) with %d private channel(s)",
        client.user.tag,
        client.user.id,
        len(client.channels),
    )
    client.dispatch("ready")
