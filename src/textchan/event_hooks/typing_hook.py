from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textchan.client import Client

logger = logging.getLogger(__name__)


async def handle(client: "Client", payload: dict) -> None:
    """Track another user's typing indicator until it lapses."""

    channel = client.get_channel(int(payload["channel_id"]))
    typing = getattr(channel, "_typing", None)
    if channel is None or typing is None:
        return

    user_id = int(payload["user_id"])
    member = payload.get("member") or {}
    user = client.new_user(member["user"]) if member.get("user") else client.users.get(user_id)

    # Our own indicator is refcounted by start_typing/stop_typing, not by echoes.
    if client.user is None or user_id != client.user.id:
        typing.observe(user_id)

    client.dispatch("typing_start", channel, user if user is not None else user_id)
