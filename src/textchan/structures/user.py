from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from discord.utils import snowflake_time


@dataclass(eq=False)
class User:
    """A chat service account as seen by this client."""

    id: int
    username: str = ""
    discriminator: str = "0"
    bot: bool = False
    avatar: str | None = None

    @classmethod
    def from_data(cls, data: dict) -> "User":
        return cls(
            id=int(data["id"]),
            username=data.get("username", ""),
            discriminator=str(data.get("discriminator", "0")),
            bot=bool(data.get("bot", False)),
            avatar=data.get("avatar"),
        )

    def patch(self, data: dict) -> None:
        """Refresh mutable profile fields from a newer payload."""

        if "username" in data:
            self.username = data["username"]
        if "discriminator" in data:
            self.discriminator = str(data["discriminator"])
        if "avatar" in data:
            self.avatar = data["avatar"]

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    @property
    def tag(self) -> str:
        if self.discriminator in ("", "0"):
            return self.username
        return f"{self.username}#{self.discriminator}"

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    def __str__(self) -> str:
        return self.mention

    def __eq__(self, other: object) -> bool:
        return isinstance(other, User) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)
