"""Exception hierarchy shared by every textchan module."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .collectors.collector import CollectorResult


class TextChanError(Exception):
    """Base class for errors raised by textchan."""


class UnsupportedOperationError(TextChanError):
    """Raised when a channel variant is asked for an operation it excludes."""

    def __init__(self, operation: str, variant: str) -> None:
        self.operation = operation
        self.variant = variant
        super().__init__(f"{variant} does not support {operation}()")


class HTTPError(TextChanError):
    """Raised for non-2xx REST responses."""

    def __init__(self, status: int, message: str = "", code: int | None = None, payload: Any = None) -> None:
        self.status = status
        self.code = code
        self.message = message
        self.payload = payload
        detail = f" (error code: {code})" if code is not None else ""
        super().__init__(f"{status}{detail}: {message}" if message else f"{status}{detail}")


class CollectorError(TextChanError):
    """Raised by ``await_messages`` when the end reason is listed in ``errors``."""

    def __init__(self, result: "CollectorResult") -> None:
        self.result = result
        super().__init__(f"collector ended: {result.reason.value} ({len(result.collected)} collected)")


__all__ = ["TextChanError", "UnsupportedOperationError", "HTTPError", "CollectorError"]
