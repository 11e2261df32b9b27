from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from discord.utils import parse_time, snowflake_time

from .user import User

if TYPE_CHECKING:
    from ..channels.base import Channel


@dataclass(eq=False)
class Message:
    """A message received in, or sent to, a channel."""

    id: int
    channel: "Channel"
    author: User | None
    content: str = ""
    pinned: bool = False
    tts: bool = False
    edited_at: datetime | None = None
    attachments: list[dict[str, Any]] = field(default_factory=list)
    embeds: list[dict[str, Any]] = field(default_factory=list)
    mentions: list[User] = field(default_factory=list)
    nonce: str | int | None = None
    hit: bool = False

    @classmethod
    def from_data(cls, channel: "Channel", data: dict) -> "Message":
        client = channel.client
        author = client.new_user(data["author"]) if data.get("author") else None
        return cls(
            id=int(data["id"]),
            channel=channel,
            author=author,
            content=data.get("content", ""),
            pinned=bool(data.get("pinned", False)),
            tts=bool(data.get("tts", False)),
            edited_at=parse_time(data.get("edited_timestamp")),
            attachments=list(data.get("attachments", [])),
            embeds=list(data.get("embeds", [])),
            mentions=[client.new_user(u) for u in data.get("mentions", [])],
            nonce=data.get("nonce"),
            hit=bool(data.get("hit", False)),
        )

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    def __str__(self) -> str:
        return self.content

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Message) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)
