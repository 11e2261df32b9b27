"""
Shared message-channel capability.

Every text-based channel variant gets the same operation set by decorating
its class::

    from textchan.channels.capability import text_based

    @text_based(exclude={"bulk_delete"})
    class DMChannel(Channel):
        def __init__(self, client, data):
            super().__init__(client, data)
            text_based.bind_state(self)

The decorator runs once, at class-definition time, and installs every
operation and accessor defined here onto the class. Names listed in
``exclude`` are installed as stubs that raise
:class:`~textchan.errors.UnsupportedOperationError` as soon as they are
called. Methods the variant defines itself are left alone, so a variant can
override any default (``DMChannel.__str__`` is the usual example).

Instances only hold the owned state created by
:meth:`TextBasedCapability.bind_state`: ``messages`` (a
:class:`~textchan.memory.cache.MessageCache`) and ``_typing`` (a
:class:`~textchan.indicators.TypingRegistry`), plus the ``last_message_id``
and ``last_pin_timestamp`` pointers.
"""

from __future__ import annotations

import logging
import warnings
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Sequence, TypeVar
from urllib.parse import urlparse

from discord.utils import snowflake_time, time_snowflake

from textchan.clients.resolver import resolve_file
from textchan.collectors import CollectorResult, MessageCollector, await_messages as _await_messages
from textchan.errors import TextChanError, UnsupportedOperationError
from textchan.indicators import TypingRegistry
from textchan.memory.cache import MessageCache
from textchan.structures.message import Message
from textchan.structures.search import SearchResult

if TYPE_CHECKING:
    from .base import Channel

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

# Bulk deletion refuses messages older than this.
BULK_DELETE_MAX_AGE = timedelta(days=14)
BULK_DELETE_MAX_COUNT = 100

_SEARCH_PASSTHROUGH = (
    "content",
    "author_id",
    "mentions",
    "has",
    "max_id",
    "min_id",
    "limit",
    "offset",
    "sort_by",
    "sort_order",
    "nsfw",
)


def _deprecated(old: str, new: str) -> None:
    warnings.warn(f"{old}() is deprecated, use {new}() instead", DeprecationWarning, stacklevel=3)


def _snowflake(value: Any) -> int:
    return int(getattr(value, "id", value))


def _me(channel: "Channel") -> int:
    user = channel.client.user
    if user is None:
        raise TextChanError("client user is not known yet (no READY received)")
    return user.id


async def _resolve_attachment(resource: Any) -> tuple[str, bytes]:
    if isinstance(resource, tuple):
        name, data = resource
        return str(name), await resolve_file(data)
    if isinstance(resource, str) and resource.startswith(("http://", "https://")):
        name = Path(urlparse(resource).path).name or "file.jpg"
        return name, await resolve_file(resource)
    if isinstance(resource, (str, Path)):
        return Path(resource).name, await resolve_file(resource)
    return "file.jpg", await resolve_file(resource)


def _code_block(content: Any, lang: Any) -> str:
    language = "" if lang is True else str(lang)
    body = str(content).replace("```", "`\u200b``")
    return f"```{language}\n{body}\n```"


# ---------------------------------------------------------------------- #
# Operations
# ---------------------------------------------------------------------- #

_OPERATIONS: Dict[str, Callable] = {}
_ACCESSORS: Dict[str, Callable] = {}


def _operation(fn: Callable) -> Callable:
    _OPERATIONS[fn.__name__] = fn
    return fn


def _accessor(fn: Callable) -> Callable:
    _ACCESSORS[fn.__name__] = fn
    return fn


@_operation
async def send(
    self: "Channel",
    content: Any = None,
    *,
    embed: dict | None = None,
    file: Any = None,
    files: Sequence[Any] | None = None,
    code: str | bool | None = None,
    tts: bool = False,
    nonce: str | int | None = None,
) -> Message:
    """
    Send a message to this channel and cache the created message.

    :param content: Text content; converted with ``str()``.
    :param embed: Optional embed payload.
    :param file: A single attachment (bytes, path, URL or ``(name, data)``).
    :param files: Several attachments of the same shapes.
    :param code: Wrap ``content`` in a code block; a string names the language,
        ``True`` leaves it unnamed.
    :param tts: Send as text-to-speech.
    :param nonce: Optional client nonce echoed back by the service.
    :returns: The created :class:`Message`.
    """
    attachments = ([file] if file is not None else []) + list(files or [])
    if content is None and embed is None and not attachments:
        raise ValueError("cannot send an empty message")
    if code is not None and code is not False and content is not None:
        content = _code_block(content, code)

    payload: dict[str, Any] = {"tts": tts}
    if content is not None:
        payload["content"] = str(content)
    if embed is not None:
        payload["embeds"] = [embed]
    if nonce is not None:
        payload["nonce"] = nonce

    resolved = [await _resolve_attachment(a) for a in attachments]
    data = await self.client.rest.send_message(self.id, payload, resolved or None)
    return self._cache_message(Message.from_data(self, data))


@_operation
async def send_message(self: "Channel", content: Any = None, **options: Any) -> Message:
    _deprecated("send_message", "send")
    return await self.send(content, **options)


@_operation
async def send_embed(self: "Channel", embed: dict, content: Any = None, **options: Any) -> Message:
    _deprecated("send_embed", "send")
    return await self.send(content, embed=embed, **options)


@_operation
async def send_file(
    self: "Channel", attachment: Any, name: str | None = None, content: Any = None, **options: Any
) -> Message:
    _deprecated("send_file", "send")
    if name is not None and not isinstance(attachment, tuple):
        attachment = (name, attachment)
    return await self.send(content, file=attachment, **options)


@_operation
async def send_files(self: "Channel", files: Sequence[Any], content: Any = None, **options: Any) -> Message:
    _deprecated("send_files", "send")
    return await self.send(content, files=files, **options)


@_operation
async def send_code(self: "Channel", lang: str, content: Any, **options: Any) -> Message:
    _deprecated("send_code", "send")
    return await self.send(content, code=lang or True, **options)


@_operation
async def fetch_message(self: "Channel", message_id: int) -> Message:
    """Fetch a single message by id (always hits the network) and cache it."""

    data = await self.client.rest.get_message(self.id, _snowflake(message_id))
    return self._cache_message(Message.from_data(self, data))


@_operation
async def fetch_messages(
    self: "Channel",
    limit: int = 50,
    *,
    before: Any = None,
    after: Any = None,
    around: Any = None,
) -> List[Message]:
    """
    Fetch up to ``limit`` (1-100) messages, newest first, and cache them.

    At most one of ``before``, ``after`` and ``around`` may be given; each
    accepts a message or a message id.
    """
    if not 1 <= limit <= 100:
        raise ValueError("limit must be between 1 and 100")
    anchors = {k: v for k, v in {"before": before, "after": after, "around": around}.items() if v is not None}
    if len(anchors) > 1:
        raise ValueError("only one of before, after and around may be given")

    params: dict[str, Any] = {"limit": limit}
    params.update({k: _snowflake(v) for k, v in anchors.items()})
    payload = await self.client.rest.get_channel_messages(self.id, params)
    return [self._cache_message(Message.from_data(self, d)) for d in payload]


@_operation
async def fetch_pinned_messages(self: "Channel") -> List[Message]:
    payload = await self.client.rest.get_pinned_messages(self.id)
    return [self._cache_message(Message.from_data(self, d)) for d in payload]


@_operation
async def search(self: "Channel", **options: Any) -> SearchResult:
    """
    Search this channel's history.

    Accepts ``content``, ``author_id``, ``mentions``, ``has``, ``max_id``,
    ``min_id``, ``limit``, ``offset``, ``sort_by``, ``sort_order`` and
    ``nsfw`` as-is, plus ``before``/``after`` (datetimes) and ``during``
    (a date or datetime, meaning that whole day), which are converted to
    snowflake bounds.
    """
    picked = {key: options.pop(key) for key in _SEARCH_PASSTHROUGH if key in options}
    params: dict[str, Any] = {k: v for k, v in picked.items() if v is not None}

    before = options.pop("before", None)
    after = options.pop("after", None)
    during = options.pop("during", None)
    if options:
        raise TypeError(f"unknown search option(s): {', '.join(sorted(options))}")

    if before is not None:
        params["max_id"] = time_snowflake(_aware(before))
    if after is not None:
        params["min_id"] = time_snowflake(_aware(after), high=True)
    if during is not None:
        day = during.date() if isinstance(during, datetime) else during
        start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
        params["min_id"] = time_snowflake(start)
        params["max_id"] = time_snowflake(start + timedelta(days=1))

    payload = await self.client.rest.search(self.id, params)
    groups = [[Message.from_data(self, d) for d in group] for group in payload.get("messages", [])]
    return SearchResult(total_results=int(payload.get("total_results", 0)), messages=groups)


def _aware(value: datetime | date) -> datetime:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@_operation
def start_typing(self: "Channel", count: int | None = None) -> None:
    """
    Show our typing indicator here until :meth:`stop_typing` balances the calls.

    The indicator request is fire-and-forget: failures are logged and clear
    the indicator without raising. ``count`` sets the number of pending
    starts instead of adding one.
    """
    self._typing.start(_me(self), count)


@_operation
def stop_typing(self: "Channel", force: bool = False) -> None:
    """Balance one :meth:`start_typing` call, or clear the indicator outright with ``force``."""

    self._typing.stop(_me(self), force=force)


@_operation
def create_message_collector(self: "Channel", predicate: Callable, **options: Any) -> MessageCollector:
    """
    Start collecting messages created in this channel that satisfy ``predicate``.

    Options: ``max_matches``, ``max_processed``, ``idle``, ``time``,
    ``reset_idle_on_any``. Matches are visible as they arrive via
    ``on_collect`` or ``async for``; ``await collector.wait()`` gives the
    final :class:`~textchan.collectors.CollectorResult`.
    """
    return MessageCollector(self, predicate, **options)


@_operation
def create_collector(self: "Channel", predicate: Callable, **options: Any) -> MessageCollector:
    _deprecated("create_collector", "create_message_collector")
    return self.create_message_collector(predicate, **options)


@_operation
async def await_messages(
    self: "Channel", predicate: Callable, *, errors: Iterable[str] = (), **options: Any
) -> CollectorResult:
    return await _await_messages(self, predicate, errors=errors, **options)


@_operation
async def bulk_delete(
    self: "Channel", messages: Iterable[Any], filter_old: bool = False, reason: str | None = None
) -> List[int]:
    """
    Delete several messages in one request and return the deleted ids.

    With ``filter_old`` messages older than 14 days are skipped instead of
    failing the whole request.
    """
    ids = [_snowflake(m) for m in messages]
    if filter_old:
        cutoff = datetime.now(timezone.utc) - BULK_DELETE_MAX_AGE
        ids = [mid for mid in ids if snowflake_time(mid) > cutoff]
    if len(ids) > BULK_DELETE_MAX_COUNT:
        raise ValueError(f"cannot bulk delete more than {BULK_DELETE_MAX_COUNT} messages")
    if not ids:
        return []

    if len(ids) == 1:
        await self.client.rest.delete_message(self.id, ids[0], reason=reason)
    else:
        await self.client.rest.bulk_delete_messages(self.id, ids, reason=reason)
    for mid in ids:
        self.messages.remove(mid)
    return ids


@_operation
async def acknowledge(self: "Channel") -> None:
    """Mark the last message in this channel as read."""

    if self.last_message_id is None:
        return
    await self.client.rest.ack_message(self.id, self.last_message_id)


@_operation
def _cache_message(self: "Channel", message: Message) -> Message:
    self.messages.store(message)
    return message


# ---------------------------------------------------------------------- #
# Accessors
# ---------------------------------------------------------------------- #


@_accessor
def typing(self: "Channel") -> bool:
    """Whether our own typing indicator is active here."""

    user = self.client.user
    return user is not None and self._typing.is_typing(user.id)


@_accessor
def typing_count(self: "Channel") -> int:
    """How many unbalanced :meth:`start_typing` calls are pending."""

    user = self.client.user
    return self._typing.count(user.id) if user is not None else 0


@_accessor
def last_message(self: "Channel") -> Message | None:
    if self.last_message_id is None:
        return None
    return self.messages.get(self.last_message_id)


@_accessor
def last_pin_at(self: "Channel") -> datetime | None:
    if self.last_pin_timestamp is None:
        return None
    return datetime.fromtimestamp(self.last_pin_timestamp, tz=timezone.utc)


# ---------------------------------------------------------------------- #
# Composition
# ---------------------------------------------------------------------- #


def _unsupported_operation(name: str) -> Callable:
    def unsupported(self: Any, *args: Any, **kwargs: Any) -> Any:
        raise UnsupportedOperationError(name, type(self).__name__)

    unsupported.__name__ = name
    return unsupported


def _unsupported_accessor(name: str) -> property:
    def unsupported(self: Any) -> Any:
        raise UnsupportedOperationError(name, type(self).__name__)

    return property(unsupported)


class TextBasedCapability:
    """Installs the shared operation table onto channel variant classes."""

    def __init__(
        self,
        operations: Dict[str, Callable] | None = None,
        accessors: Dict[str, Callable] | None = None,
    ) -> None:
        self.operations = dict(operations if operations is not None else _OPERATIONS)
        self.accessors = dict(accessors if accessors is not None else _ACCESSORS)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self.operations) | frozenset(self.accessors)

    def apply(self, cls: C, exclude: Iterable[str] = ()) -> C:
        """Attach every operation and accessor to ``cls`` except ``exclude``."""

        excluded = frozenset(exclude)
        unknown = excluded - self.names
        if unknown:
            raise ValueError(f"cannot exclude unknown operation(s): {', '.join(sorted(unknown))}")

        for name, fn in self.operations.items():
            if name in excluded:
                setattr(cls, name, _unsupported_operation(name))
            elif name not in cls.__dict__:
                setattr(cls, name, fn)
        for name, getter in self.accessors.items():
            if name in excluded:
                setattr(cls, name, _unsupported_accessor(name))
            elif name not in cls.__dict__:
                setattr(cls, name, property(getter, doc=getter.__doc__))

        cls.unsupported_operations = excluded
        logger.debug("Applied text-based capability to %s (excluded: %s)", cls.__name__, sorted(excluded))
        return cls

    def __call__(self, cls: C | None = None, *, exclude: Iterable[str] = ()) -> Any:
        """Class decorator form: ``@text_based`` or ``@text_based(exclude=...)``."""

        if cls is None:
            return lambda target: self.apply(target, exclude)
        return self.apply(cls, exclude)

    @staticmethod
    def bind_state(channel: "Channel") -> None:
        """Create the per-instance state the operations rely on."""

        client = channel.client
        channel.messages = MessageCache(channel, client.message_cache_max_size)

        async def send_typing() -> None:
            await client.rest.send_typing(channel.id)

        def on_stop(user_id: int, record: Any) -> None:
            client.dispatch("typing_stop", channel, client.users.get(user_id, user_id), record)

        channel._typing = TypingRegistry(channel.id, send_typing=send_typing, on_stop=on_stop)
        if not hasattr(channel, "last_message_id"):
            channel.last_message_id = None
        if not hasattr(channel, "last_pin_timestamp"):
            channel.last_pin_timestamp = None


text_based = TextBasedCapability()


def supports(channel_or_cls: Any, operation: str) -> bool:
    """Return ``True`` if ``operation`` is available on a text-based variant."""

    cls = channel_or_cls if isinstance(channel_or_cls, type) else type(channel_or_cls)
    excluded: frozenset[str] = getattr(cls, "unsupported_operations", frozenset())
    return operation in text_based.names and operation not in excluded


__all__ = [
    "TextBasedCapability",
    "text_based",
    "supports",
    "BULK_DELETE_MAX_AGE",
    "BULK_DELETE_MAX_COUNT",
]
