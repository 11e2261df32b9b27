"""
Resolve file-like inputs into bytes or base64 ``data:`` URIs.

Accepted resources: ``bytes``/``bytearray``, a ``data:`` URI (returned as is
by :func:`resolve_image`), an ``http(s)`` URL (downloaded with ``aiohttp``),
or a local path.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import Union

import aiohttp

from textchan.config import core

logger = logging.getLogger(__name__)

Resource = Union[bytes, bytearray, str, Path]

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def _mime_for(data: bytes) -> str:
    for magic, mime in _SIGNATURES:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


async def _fetch_bytes(url: str, max_mb: int) -> bytes:
    async with aiohttp.ClientSession() as s, s.get(url) as r:
        r.raise_for_status()
        data = await r.read()
        if len(data) > max_mb * 1024 * 1024:
            raise ValueError("resource too large")
        return data


async def resolve_file(resource: Resource, *, max_mb: int | None = None) -> bytes:
    """Return the raw bytes behind ``resource``."""

    if isinstance(resource, (bytes, bytearray)):
        return bytes(resource)
    if isinstance(resource, str) and resource.startswith(("http://", "https://")):
        return await _fetch_bytes(resource, max_mb or core.MAX_IMAGE_MB)
    if isinstance(resource, (str, Path)):
        path = Path(resource)
        if not path.is_file():
            raise FileNotFoundError(f"No file at {path}")
        return await asyncio.to_thread(path.read_bytes)
    raise TypeError(f"Cannot resolve file from {type(resource).__name__}")


def to_data_uri(data: bytes) -> str:
    return f"data:{_mime_for(data)};base64,{base64.b64encode(data).decode('ascii')}"


async def resolve_image(resource: Resource | None) -> str | None:
    """Return ``resource`` as a base64 ``data:`` URI (``None`` passes through)."""

    if resource is None:
        return None
    if isinstance(resource, str) and resource.startswith("data:"):
        return resource
    data = await resolve_file(resource)
    logger.debug("Resolved image (%d bytes)", len(data))
    return to_data_uri(data)


__all__ = ["resolve_file", "resolve_image", "to_data_uri", "Resource"]
