import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from textchan.client import Client


@pytest.mark.asyncio
async def test_ready_sets_user_and_private_channels(rest):
    client = Client(rest=rest)
    ready = MagicMock()
    client.add_listener("ready", ready)

    await client.handle_event(
        "READY",
        {
            "user": {"id": "1", "username": "me"},
            "private_channels": [{"id": "100", "type": 1, "recipients": [{"id": "2", "username": "bob"}]}],
        },
    )

    assert client.user.id == 1
    assert str(client.get_channel(100)) == "<@2>"
    ready.assert_called_once_with()


@pytest.mark.asyncio
async def test_message_create_caches_and_dispatches(client, dm, message_payload):
    received = []
    client.add_listener("message", received.append)

    await client.handle_event("MESSAGE_CREATE", message_payload(11, content="yo"))

    assert [m.id for m in received] == [11]
    assert dm.messages.get(11) is received[0]
    assert dm.last_message_id == 11
    assert received[0].author is client.users[2]


@pytest.mark.asyncio
async def test_message_for_unknown_channel_ignored(client, message_payload):
    received = []
    client.add_listener("message", received.append)

    await client.handle_event("MESSAGE_CREATE", message_payload(11, channel_id=999))

    assert received == []


@pytest.mark.asyncio
async def test_typing_start_tracks_and_expires(client, dm):
    starts, stops = [], []
    client.add_listener("typing_start", lambda channel, user: starts.append(user))
    client.add_listener("typing_stop", lambda channel, user, record: stops.append(user))
    dm._typing.expiry = 0.05

    await client.handle_event("TYPING_START", {"channel_id": "100", "user_id": "2", "timestamp": 0})

    assert dm._typing.is_typing(2)
    assert starts == [client.users[2]]

    await asyncio.sleep(0.1)

    assert not dm._typing.is_typing(2)
    assert stops == [client.users[2]]


@pytest.mark.asyncio
async def test_own_typing_echo_not_tracked(client, dm):
    await client.handle_event("TYPING_START", {"channel_id": "100", "user_id": "1", "timestamp": 0})

    assert not dm._typing.is_typing(1)
    assert dm.typing_count == 0


@pytest.mark.asyncio
async def test_channel_delete_tears_down_state(client, dm):
    dm._typing.observe(2)
    deleted = []
    client.add_listener("channel_delete", deleted.append)

    await client.handle_event("CHANNEL_DELETE", {"id": "100", "type": 1})

    assert deleted == [dm]
    assert dm.deleted
    assert len(dm._typing) == 0
    assert client.get_channel(100) is None

    # Repeated delete for a forgotten channel is a no-op.
    await client.handle_event("CHANNEL_DELETE", {"id": "100", "type": 1})
    assert deleted == [dm]


@pytest.mark.asyncio
async def test_channel_create_registers_variant(client):
    created = []
    client.add_listener("channel_create", created.append)

    await client.handle_event("CHANNEL_CREATE", {"id": "300", "type": 0, "name": "news"})

    assert created == [client.get_channel(300)]


@pytest.mark.asyncio
async def test_unknown_event_ignored(client):
    await client.handle_event("PRESENCE_UPDATE", {})


def test_dispatch_survives_failing_listener(client, caplog):
    calls = []

    def broken(*args):
        raise RuntimeError("listener bug")

    client.add_listener("message", broken)
    client.add_listener("message", calls.append)

    with caplog.at_level(logging.ERROR, logger="textchan.client"):
        client.dispatch("message", "payload")

    assert calls == ["payload"]
    assert "listener bug" in caplog.text


def test_remove_listener_is_tolerant(client):
    client.remove_listener("message", print)
    client.add_listener("message", print)
    client.remove_listener("message", print)
    assert client.listeners("message") == []


def test_new_user_is_identity_mapped(client):
    first = client.new_user({"id": "5", "username": "old"})
    second = client.new_user({"id": "5", "username": "new"})

    assert first is second
    assert second.username == "new"
