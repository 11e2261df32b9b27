from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from .base import Channel, ChannelType, parse_pin_timestamp
from .capability import text_based

if TYPE_CHECKING:
    from ..client import Client
    from ..structures.user import User


@text_based(exclude={"bulk_delete"})
class GroupDMChannel(Channel):
    """A direct message channel shared by several recipients."""

    type = ChannelType.GROUP_DM

    def __init__(self, client: "Client", data: dict) -> None:
        super().__init__(client, data)
        text_based.bind_state(self)

    def setup(self, data: dict) -> None:
        self.name: str | None = data.get("name")
        self.icon: str | None = data.get("icon")
        owner_id = data.get("owner_id")
        self.owner_id: int | None = int(owner_id) if owner_id else None
        self.recipients: Dict[int, "User"] = {}
        for payload in data.get("recipients", []):
            user = self.client.new_user(payload)
            self.recipients[user.id] = user
        last_message_id = data.get("last_message_id")
        self.last_message_id: int | None = int(last_message_id) if last_message_id else None
        self.last_pin_timestamp: float | None = parse_pin_timestamp(data.get("last_pin_timestamp"))

    @property
    def owner(self) -> "User | None":
        if self.owner_id is None:
            return None
        return self.recipients.get(self.owner_id) or self.client.users.get(self.owner_id)

    def __str__(self) -> str:
        return self.name or ", ".join(u.username for u in self.recipients.values())
