"""Direct-message channel between the client user and one recipient."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from textchan.clients.resolver import Resource, resolve_image
from textchan.structures.webhook import Webhook

from .base import Channel, ChannelType, parse_pin_timestamp
from .capability import text_based

if TYPE_CHECKING:
    from ..client import Client
    from ..structures.user import User

logger = logging.getLogger(__name__)


@text_based(exclude={"bulk_delete"})
class DMChannel(Channel):
    """
    A direct message channel.

    Bulk deletion is unavailable here; every other text-based operation is
    inherited from the shared capability.
    """

    type = ChannelType.DM

    def __init__(self, client: "Client", data: dict) -> None:
        super().__init__(client, data)
        text_based.bind_state(self)

    def setup(self, data: dict) -> None:
        recipients = data.get("recipients") or []
        if not recipients:
            raise ValueError(f"DM channel {self.id} payload has no recipient")
        if not hasattr(self, "_recipient"):
            self._recipient: "User" = self.client.new_user(recipients[0])
        last_message_id = data.get("last_message_id")
        self.last_message_id: int | None = int(last_message_id) if last_message_id else None
        self.last_pin_timestamp: float | None = parse_pin_timestamp(data.get("last_pin_timestamp"))

    @property
    def recipient(self) -> "User":
        return self._recipient

    def __str__(self) -> str:
        # Mentions the recipient rather than the channel.
        return str(self.recipient)

    async def fetch_webhooks(self) -> List[Webhook]:
        """Fetch every webhook attached to this channel."""

        payload = await self.client.rest.get_channel_webhooks(self.id)
        return [self.client.new_webhook(d) for d in payload]

    async def create_webhook(
        self, name: str, avatar: Resource | None = None, reason: str | None = None
    ) -> Webhook:
        """
        Create a webhook for this channel.

        :param name: Webhook name.
        :param avatar: A ``data:`` URI (sent as-is), or bytes, a path or a URL
            that is resolved into one first.
        :param reason: Audit log reason.
        """
        if not (isinstance(avatar, str) and avatar.startswith("data:")):
            avatar = await resolve_image(avatar)
        payload = await self.client.rest.create_webhook(self.id, name, avatar, reason)
        logger.info("Created webhook %s in DM channel %s", payload.get("id"), self.id)
        return self.client.new_webhook(payload)
