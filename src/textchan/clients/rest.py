"""
REST access for channel operations.

:class:`RestClient` owns the ``aiohttp`` session and turns non-2xx responses
into :class:`~textchan.errors.HTTPError`. :class:`RestMethods` exposes one
coroutine per network action the channel layer needs and returns raw
payloads; channels build their own structures from them.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Sequence
from urllib.parse import quote

import aiohttp

from textchan.config import core
from textchan.errors import HTTPError

logger = logging.getLogger(__name__)

FilePayload = tuple[str, bytes]


class RestClient:
    """Thin authenticated wrapper around a shared :class:`aiohttp.ClientSession`."""

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
        user_agent: str | None = None,
    ) -> None:
        self.token = token or core.TOKEN
        self.base_url = (base_url or core.API_BASE).rstrip("/")
        self.user_agent = user_agent or core.USER_AGENT
        self._session = session
        self._owns_session = session is None

    def _headers(self, reason: str | None) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.token:
            headers["Authorization"] = f"Bot {self.token}"
        if reason:
            headers["X-Audit-Log-Reason"] = quote(reason, safe="/ ")
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def request(
        self,
        method: str,
        route: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        files: Sequence[FilePayload] | None = None,
        reason: str | None = None,
    ) -> Any:
        """Issue ``method route`` and return the decoded JSON body (``None`` for 204)."""

        session = await self._get_session()
        url = f"{self.base_url}{route}"
        kwargs: dict[str, Any] = {"headers": self._headers(reason)}
        if params:
            kwargs["params"] = {k: _param(v) for k, v in params.items() if v is not None}
        if files:
            form = aiohttp.FormData()
            form.add_field("payload_json", json.dumps(json_body or {}), content_type="application/json")
            for index, (name, data) in enumerate(files):
                form.add_field(f"files[{index}]", data, filename=name)
            kwargs["data"] = form
        elif json_body is not None:
            kwargs["json"] = json_body

        logger.debug("%s %s", method, route)
        async with session.request(method, url, **kwargs) as resp:
            if resp.status == 204:
                return None
            if resp.content_type == "application/json":
                body = await resp.json()
            else:
                body = await resp.text()
            if 200 <= resp.status < 300:
                return body
            message = body.get("message", "") if isinstance(body, dict) else str(body)
            code = body.get("code") if isinstance(body, dict) else None
            raise HTTPError(resp.status, message, code, body)

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()


def _param(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return value


class RestMethods:
    """One coroutine per channel-layer network action."""

    def __init__(self, http: RestClient) -> None:
        self.http = http

    async def send_message(
        self, channel_id: int, payload: dict, files: Sequence[FilePayload] | None = None
    ) -> dict:
        return await self.http.request(
            "POST", f"/channels/{channel_id}/messages", json_body=payload, files=files
        )

    async def get_message(self, channel_id: int, message_id: int) -> dict:
        return await self.http.request("GET", f"/channels/{channel_id}/messages/{message_id}")

    async def get_channel_messages(self, channel_id: int, params: dict[str, Any]) -> list[dict]:
        return await self.http.request("GET", f"/channels/{channel_id}/messages", params=params)

    async def get_pinned_messages(self, channel_id: int) -> list[dict]:
        return await self.http.request("GET", f"/channels/{channel_id}/pins")

    async def search(self, channel_id: int, params: dict[str, Any]) -> dict:
        return await self.http.request("GET", f"/channels/{channel_id}/messages/search", params=params)

    async def send_typing(self, channel_id: int) -> None:
        await self.http.request("POST", f"/channels/{channel_id}/typing")

    async def bulk_delete_messages(
        self, channel_id: int, message_ids: Iterable[int], reason: str | None = None
    ) -> None:
        await self.http.request(
            "POST",
            f"/channels/{channel_id}/messages/bulk-delete",
            json_body={"messages": [str(mid) for mid in message_ids]},
            reason=reason,
        )

    async def delete_message(self, channel_id: int, message_id: int, reason: str | None = None) -> None:
        await self.http.request("DELETE", f"/channels/{channel_id}/messages/{message_id}", reason=reason)

    async def ack_message(self, channel_id: int, message_id: int) -> dict | None:
        return await self.http.request(
            "POST", f"/channels/{channel_id}/messages/{message_id}/ack", json_body={"token": None}
        )

    async def get_channel_webhooks(self, channel_id: int) -> list[dict]:
        return await self.http.request("GET", f"/channels/{channel_id}/webhooks")

    async def create_webhook(
        self, channel_id: int, name: str, avatar: str | None = None, reason: str | None = None
    ) -> dict:
        return await self.http.request(
            "POST",
            f"/channels/{channel_id}/webhooks",
            json_body={"name": name, "avatar": avatar},
            reason=reason,
        )

    async def close(self) -> None:
        await self.http.close()


__all__ = ["RestClient", "RestMethods", "FilePayload"]
