from __future__ import annotations

from dataclasses import dataclass

from .user import User


@dataclass
class Webhook:
    """A webhook bound to a channel."""

    id: int
    name: str | None
    channel_id: int
    token: str | None = None
    guild_id: int | None = None
    avatar: str | None = None
    owner: User | None = None

    @classmethod
    def from_data(cls, data: dict, owner: User | None = None) -> "Webhook":
        guild_id = data.get("guild_id")
        return cls(
            id=int(data["id"]),
            name=data.get("name"),
            channel_id=int(data["channel_id"]),
            token=data.get("token"),
            guild_id=int(guild_id) if guild_id else None,
            avatar=data.get("avatar"),
            owner=owner,
        )

    def __str__(self) -> str:
        return self.name or str(self.id)
