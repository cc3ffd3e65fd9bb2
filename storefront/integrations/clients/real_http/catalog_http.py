"""
Real Catalogue HTTP Client.

Performs one GET against the storefront products endpoint per call and
normalises the payload into ``CatalogItem`` objects. No caching, no retries:
those belong to the catalogue service and its callers.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem
from storefront.integrations.contracts.errors import FetchError, FetchErrorKind
from storefront.integrations.contracts.interfaces import CatalogSource
from storefront.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    normalize_collection_response,
)
from storefront.utils.rate_limiter import AsyncRateLimiter

logger = logging.getLogger(__name__)

# Backoff guidance after a 429 when the server sends no Retry-After header.
DEFAULT_RETRY_AFTER_S = 5.0


def _parse_retry_after(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_RETRY_AFTER_S
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER_S
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER_S


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        message = data.get("message") or data.get("detail")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return fallback


def classify_response(response: httpx.Response) -> FetchError:
    """Map a non-success response onto the fetch error taxonomy."""
    status = response.status_code
    if status == 429:
        return FetchError(
            FetchErrorKind.RATE_LIMITED,
            _error_message(response, "Too many requests. Please wait a moment and try again."),
            status_code=status,
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
        )
    if status == 404:
        return FetchError(FetchErrorKind.NOT_FOUND, _error_message(response, "Products not found"), status_code=status)
    return FetchError(
        FetchErrorKind.SERVER_ERROR,
        _error_message(response, f"Failed to fetch products (HTTP {status})"),
        status_code=status,
    )


class HttpCatalogClient(CatalogSource):
    def __init__(
        self,
        base_url: Optional[str] = None,
        products_path: str = "/products",
        api_key: Optional[str] = None,
        timeout_seconds: float = 10.0,
        throttle: Optional[AsyncRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("CATALOG_API_URL", "")).rstrip("/")
        self.products_path = products_path
        self.api_key = api_key or os.getenv("CATALOG_API_KEY", "")
        self.timeout_seconds = timeout_seconds
        self.throttle = throttle
        self._transport = transport

    @property
    def name(self) -> str:
        return "http"

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def fetch(self, query_key: QueryKey) -> List[CatalogItem]:
        if not self.base_url:
            raise ValueError("CATALOG_API_URL is not configured.")

        if self.throttle is not None:
            await self.throttle.acquire()

        url = f"{self.base_url}{self.products_path}"
        params = query_key.to_request_params()
        logger.debug("GET %s params=%s", url, params)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=self._headers())
        except httpx.TransportError as exc:
            raise FetchError(
                FetchErrorKind.NETWORK_ERROR,
                f"Network error fetching products: {type(exc).__name__}: {exc}",
            ) from exc

        if not response.is_success:
            error = classify_response(response)
            logger.warning("Catalogue request for %s returned HTTP %s", query_key, response.status_code)
            raise error

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise FetchError(
                FetchErrorKind.INVALID_RESPONSE_SHAPE,
                "Catalogue response is not valid JSON",
                status_code=response.status_code,
            ) from exc

        try:
            return normalize_collection_response(payload)
        except IntegrationResponseError as exc:
            raise FetchError(
                FetchErrorKind.INVALID_RESPONSE_SHAPE,
                str(exc),
                status_code=response.status_code,
            ) from exc
