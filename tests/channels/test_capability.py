import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from discord.utils import time_snowflake

from textchan.channels import Channel, DMChannel, GroupDMChannel, TextChannel, supports
from textchan.channels.capability import TextBasedCapability, text_based
from textchan.errors import UnsupportedOperationError
from textchan.structures.message import Message


def test_operations_installed_once_on_the_class(dm):
    assert "send" in DMChannel.__dict__
    assert "send" not in vars(dm)
    assert DMChannel.send is TextChannel.send is GroupDMChannel.send
    assert isinstance(DMChannel.__dict__["typing_count"], property)


def test_variant_overrides_are_kept(dm):
    assert DMChannel.__str__ is not Channel.__str__
    assert str(dm) == "<@2>"


def test_exclusions_recorded_per_variant():
    assert DMChannel.unsupported_operations == frozenset({"bulk_delete"})
    assert GroupDMChannel.unsupported_operations == frozenset({"bulk_delete"})
    assert TextChannel.unsupported_operations == frozenset()
    assert not supports(DMChannel, "bulk_delete")
    assert supports(TextChannel, "bulk_delete")
    assert supports(DMChannel, "send")


@pytest.mark.asyncio
async def test_bulk_delete_excluded_but_send_works(dm, rest, message_payload):
    with pytest.raises(UnsupportedOperationError) as excinfo:
        dm.bulk_delete([11, 12])
    assert excinfo.value.operation == "bulk_delete"
    rest.bulk_delete_messages.assert_not_called()

    rest.send_message.return_value = message_payload(11, content="hello", author_id=1)
    message = await dm.send("hello")

    rest.send_message.assert_awaited_once_with(100, {"tts": False, "content": "hello"}, None)
    assert message.content == "hello"
    assert dm.messages.get(11) is message
    assert dm.last_message_id == 11
    assert dm.last_message is message


def test_unknown_exclusion_rejected():
    capability = TextBasedCapability()

    with pytest.raises(ValueError):

        @capability(exclude={"teleport"})
        class Broken(Channel):
            pass


@pytest.mark.asyncio
async def test_capability_applies_to_new_variants(client, rest):
    @text_based(exclude={"search", "typing"})
    class AnnouncementChannel(Channel):
        def __init__(self, client, data):
            super().__init__(client, data)
            text_based.bind_state(self)

    channel = AnnouncementChannel(client, {"id": "300"})
    with pytest.raises(UnsupportedOperationError):
        await channel.search(content="x")
    with pytest.raises(UnsupportedOperationError):
        channel.typing

    rest.get_pinned_messages.return_value = []
    assert await channel.fetch_pinned_messages() == []


@pytest.mark.asyncio
async def test_bulk_delete_on_text_channel(text_channel, rest):
    text_channel._cache_message(Message(id=11, channel=text_channel, author=None))
    deleted = await text_channel.bulk_delete([11, 12], reason="cleanup")

    assert deleted == [11, 12]
    rest.bulk_delete_messages.assert_awaited_once_with(200, [11, 12], reason="cleanup")
    assert 11 not in text_channel.messages


@pytest.mark.asyncio
async def test_bulk_delete_filter_old(text_channel, rest):
    now = datetime.now(timezone.utc)
    old = time_snowflake(now - timedelta(days=20))
    fresh = time_snowflake(now - timedelta(days=1))

    deleted = await text_channel.bulk_delete([old, fresh], filter_old=True)

    assert deleted == [fresh]
    rest.delete_message.assert_awaited_once_with(200, fresh, reason=None)
    rest.bulk_delete_messages.assert_not_called()


@pytest.mark.asyncio
async def test_bulk_delete_limit(text_channel):
    with pytest.raises(ValueError):
        await text_channel.bulk_delete(range(1, 102))


@pytest.mark.asyncio
async def test_send_code_block_and_empty_message(dm, rest, message_payload):
    rest.send_message.return_value = message_payload(11)
    await dm.send("print(1)", code="py")
    payload = rest.send_message.await_args.args[1]
    assert payload["content"] == "```py\nprint(1)\n```"

    with pytest.raises(ValueError):
        await dm.send()


@pytest.mark.asyncio
async def test_send_with_file_tuple(dm, rest, message_payload):
    rest.send_message.return_value = message_payload(11)

    await dm.send("see attached", file=("notes.txt", b"hello"))

    assert rest.send_message.await_args.args[2] == [("notes.txt", b"hello")]


@pytest.mark.asyncio
async def test_deprecated_wrappers_delegate_to_send(dm, rest, message_payload):
    rest.send_message.return_value = message_payload(11)

    with pytest.warns(DeprecationWarning):
        await dm.send_message("hello")
    with pytest.warns(DeprecationWarning):
        await dm.send_embed({"title": "t"})

    assert rest.send_message.await_args.args[1]["embeds"] == [{"title": "t"}]


@pytest.mark.asyncio
async def test_fetch_messages_caches_and_validates(dm, rest, message_payload):
    rest.get_channel_messages.return_value = [message_payload(13), message_payload(12)]

    messages = await dm.fetch_messages(limit=2, before=14)

    rest.get_channel_messages.assert_awaited_once_with(100, {"limit": 2, "before": 14})
    assert [m.id for m in messages] == [13, 12]
    assert 12 in dm.messages and 13 in dm.messages
    assert dm.last_message_id == 13

    with pytest.raises(ValueError):
        await dm.fetch_messages(before=1, after=2)
    with pytest.raises(ValueError):
        await dm.fetch_messages(limit=0)


@pytest.mark.asyncio
async def test_fetch_message_network_error_propagates(dm, rest):
    rest.get_message.side_effect = ConnectionError("boom")

    with pytest.raises(ConnectionError):
        await dm.fetch_message(99)


@pytest.mark.asyncio
async def test_search_converts_date_bounds(dm, rest, message_payload):
    rest.search.return_value = {
        "total_results": 1,
        "messages": [[message_payload(11, hit=True), message_payload(10)]],
    }
    before = datetime(2024, 5, 1, tzinfo=timezone.utc)

    result = await dm.search(content="cats", before=before, limit=None)

    params = rest.search.await_args.args[1]
    assert params == {"content": "cats", "max_id": time_snowflake(before)}
    assert result.total_results == 1
    assert [m.id for m in result.hits] == [11]

    with pytest.raises(TypeError):
        await dm.search(colour="blue")


@pytest.mark.asyncio
async def test_start_and_stop_typing_on_channel(dm, rest):
    dm.start_typing()
    dm.start_typing()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    rest.send_typing.assert_awaited_once_with(100)
    assert dm.typing is True
    assert dm.typing_count == 2

    dm.stop_typing()
    assert dm.typing_count == 1
    dm.stop_typing(force=True)
    assert dm.typing is False
    assert dm.typing_count == 0


@pytest.mark.asyncio
async def test_acknowledge_uses_last_message(dm, rest):
    await dm.acknowledge()
    rest.ack_message.assert_awaited_once_with(100, 10)


@pytest.mark.asyncio
async def test_typing_request_sent_even_when_stopped_immediately(dm, rest):
    dm.start_typing()
    dm.stop_typing()
    assert dm.typing is False

    for _ in range(5):
        await asyncio.sleep(0)

    rest.send_typing.assert_awaited_once_with(100)
    assert dm.typing is False
