"""
Client facade tying channels to the network and the event stream.

The client owns:

- ``rest``: the :class:`~textchan.clients.rest.RestMethods` collaborator every
  channel operation goes through.
- ``users`` / ``channels``: identity maps built from payloads.
- the listener table behind :meth:`Client.dispatch`, which collectors and
  applications subscribe to.

Decoded gateway events enter through :meth:`Client.handle_event` and are
routed to the matching module in :mod:`textchan.event_hooks`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List

from textchan.channels import Channel, create_channel
from textchan.clients.rest import RestClient, RestMethods
from textchan.config import core
from textchan.event_hooks import channel_hook, message_hook, ready_hook, typing_hook
from textchan.structures.user import User
from textchan.structures.webhook import Webhook

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]

_EVENT_HOOKS: Dict[str, Callable[["Client", dict], Awaitable[None]]] = {
    "READY": ready_hook.handle,
    "CHANNEL_CREATE": channel_hook.handle_create,
    "CHANNEL_DELETE": channel_hook.handle_delete,
    "MESSAGE_CREATE": message_hook.handle,
    "TYPING_START": typing_hook.handle,
}


class Client:
    """Holds channel state and routes events; transport is supplied by ``rest``."""

    def __init__(
        self,
        *,
        token: str | None = None,
        rest: RestMethods | None = None,
        message_cache_max_size: int | None = None,
    ) -> None:
        self.rest = rest if rest is not None else RestMethods(RestClient(token))
        self.message_cache_max_size = (
            core.MESSAGE_CACHE_MAX_SIZE if message_cache_max_size is None else message_cache_max_size
        )
        self.user: User | None = None
        self.users: Dict[int, User] = {}
        self.channels: Dict[int, Channel] = {}
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    # ------------------------------------------------------------------ #
    # Event stream
    # ------------------------------------------------------------------ #

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        """Detach ``listener``; a no-op if it is not attached."""

        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, ()))

    def dispatch(self, event: str, *args: Any) -> None:
        """Call every listener for ``event`` in registration order."""

        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener %r for %s failed", listener, event)

    async def handle_event(self, name: str, payload: dict) -> None:
        """Apply a decoded gateway event to local state."""

        hook = _EVENT_HOOKS.get(name)
        if hook is None:
            logger.debug("Ignoring unhandled event %s", name)
            return
        await hook(self, payload)

    # ------------------------------------------------------------------ #
    # Structure construction
    # ------------------------------------------------------------------ #

    def new_user(self, data: dict) -> User:
        """Return the cached user for ``data["id"]``, refreshed, or a new one."""

        user_id = int(data["id"])
        user = self.users.get(user_id)
        if user is None:
            user = User.from_data(data)
            self.users[user_id] = user
        else:
            user.patch(data)
        return user

    def new_channel(self, data: dict) -> Channel | None:
        channel_id = int(data["id"])
        existing = self.channels.get(channel_id)
        if existing is not None:
            existing.setup(data)
            return existing

        channel = create_channel(self, data)
        if channel is None:
            logger.debug("Skipping channel %s of unsupported type %s", channel_id, data.get("type"))
            return None
        self.channels[channel_id] = channel
        return channel

    def new_webhook(self, data: dict) -> Webhook:
        owner = self.new_user(data["user"]) if data.get("user") else None
        return Webhook.from_data(data, owner=owner)

    def get_channel(self, channel_id: int) -> Channel | None:
        return self.channels.get(channel_id)

    async def close(self) -> None:
        for channel in self.channels.values():
            typing = getattr(channel, "_typing", None)
            if typing is not None:
                typing.clear()
        await self.rest.close()


__all__ = ["Client"]
