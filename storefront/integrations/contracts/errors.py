"""
Fetch failure taxonomy shared by every catalogue source.

Both clients/real_http/catalog_http.py and clients/mocks/local_catalog.py
raise ``FetchError`` so that the coalescer and the catalogue service can
forward one error type to every waiter without inspecting transport details.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    RATE_LIMITED = "RATE_LIMITED"
    NOT_FOUND = "NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    INVALID_RESPONSE_SHAPE = "INVALID_RESPONSE_SHAPE"


class FetchError(Exception):
    """A catalogue request that did not produce a collection."""

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        # Backoff guidance in seconds; only set for RATE_LIMITED.
        self.retry_after = retry_after

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is FetchErrorKind.RATE_LIMITED

    def __repr__(self) -> str:
        return f"FetchError(kind={self.kind.value}, message={self.message!r}, status_code={self.status_code})"
