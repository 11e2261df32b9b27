import base64

import pytest

from textchan.clients import resolver

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


@pytest.mark.asyncio
async def test_bytes_become_data_uri():
    uri = await resolver.resolve_image(PNG)

    assert uri.startswith("data:image/png;base64,")
    assert base64.b64decode(uri.split(",", 1)[1]) == PNG


@pytest.mark.asyncio
async def test_data_uri_and_none_pass_through():
    assert await resolver.resolve_image("data:image/gif;base64,R0lG") == "data:image/gif;base64,R0lG"
    assert await resolver.resolve_image(None) is None


@pytest.mark.asyncio
async def test_local_path_read(tmp_path):
    path = tmp_path / "avatar.gif"
    path.write_bytes(b"GIF89a" + b"\x00" * 4)

    uri = await resolver.resolve_image(str(path))

    assert uri.startswith("data:image/gif;base64,")


@pytest.mark.asyncio
async def test_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        await resolver.resolve_file(tmp_path / "nope.png")


@pytest.mark.asyncio
async def test_url_downloaded(monkeypatch):
    fetched = []

    async def fake_fetch(url, max_mb):
        fetched.append(url)
        return b"\xff\xd8\xff\xe0"

    monkeypatch.setattr(resolver, "_fetch_bytes", fake_fetch)

    uri = await resolver.resolve_image("https://cdn.test/a.jpg")

    assert fetched == ["https://cdn.test/a.jpg"]
    assert uri.startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
async def test_unsupported_type_rejected():
    with pytest.raises(TypeError):
        await resolver.resolve_file(12345)
