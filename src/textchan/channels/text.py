from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Channel, ChannelType, parse_pin_timestamp
from .capability import text_based

if TYPE_CHECKING:
    from ..client import Client


@text_based
class TextChannel(Channel):
    """A guild text channel. Supports the full text-based operation set."""

    type = ChannelType.TEXT

    def __init__(self, client: "Client", data: dict) -> None:
        super().__init__(client, data)
        text_based.bind_state(self)

    def setup(self, data: dict) -> None:
        guild_id = data.get("guild_id")
        self.guild_id: int | None = int(guild_id) if guild_id else None
        self.name: str = data.get("name", "")
        self.topic: str | None = data.get("topic")
        self.nsfw: bool = bool(data.get("nsfw", False))
        self.position: int = int(data.get("position", 0))
        last_message_id = data.get("last_message_id")
        self.last_message_id: int | None = int(last_message_id) if last_message_id else None
        self.last_pin_timestamp: float | None = parse_pin_timestamp(data.get("last_pin_timestamp"))
