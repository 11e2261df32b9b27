from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from discord.utils import parse_time, snowflake_time

if TYPE_CHECKING:
    from ..client import Client


def parse_pin_timestamp(raw: str | None) -> float | None:
    """Convert a wire ISO-8601 pin timestamp to POSIX seconds."""

    parsed = parse_time(raw)
    return parsed.timestamp() if parsed is not None else None


class ChannelType(enum.IntEnum):
    TEXT = 0
    DM = 1
    GROUP_DM = 3


class Channel:
    """Base for every channel variant: identity, creation time, deletion flag."""

    type: ChannelType

    def __init__(self, client: "Client", data: dict) -> None:
        self.client = client
        self.id = int(data["id"])
        self.deleted = False
        self.setup(data)

    def setup(self, data: dict) -> None:
        """Populate variant fields from a channel payload."""

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"

    def __str__(self) -> str:
        return self.mention

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Channel) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)
