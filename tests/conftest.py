import os, sys
import warnings
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

os.environ.setdefault("TEXTCHAN_TOKEN", "test-token")
os.environ.setdefault("TEXTCHAN_MESSAGE_CACHE_MAX_SIZE", "200")

# Silence deprecation warnings surfaced from discord.py voice support during import
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)

from textchan.client import Client  # noqa: E402

ME_ID = 1
RECIPIENT_ID = 2
DM_ID = 100
TEXT_ID = 200


@pytest.fixture
def rest():
    """REST collaborator double; every method is awaitable."""

    return AsyncMock()


@pytest.fixture
def client(rest):
    c = Client(rest=rest)
    c.user = c.new_user({"id": str(ME_ID), "username": "me", "bot": True})
    return c


@pytest.fixture
def dm(client):
    return client.new_channel(
        {
            "id": str(DM_ID),
            "type": 1,
            "recipients": [{"id": str(RECIPIENT_ID), "username": "bob", "discriminator": "0"}],
            "last_message_id": "10",
            "last_pin_timestamp": "2024-01-02T03:04:05+00:00",
        }
    )


@pytest.fixture
def text_channel(client):
    return client.new_channel({"id": str(TEXT_ID), "type": 0, "guild_id": "7", "name": "general"})


@pytest.fixture
def message_payload():
    def _make(message_id, channel_id=DM_ID, content="hi", author_id=RECIPIENT_ID, **extra):
        payload = {
            "id": str(message_id),
            "channel_id": str(channel_id),
            "content": content,
            "author": {"id": str(author_id), "username": f"user{author_id}"},
        }
        payload.update(extra)
        return payload

    return _make

