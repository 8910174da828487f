"""
HTTP access with typed failures.

Thin wrapper over httpx.Client that turns transport errors and error status
codes into the ScrapingError hierarchy, so callers can record what went wrong
without inspecting httpx internals.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..core.errors import BlockedError, NetworkError, ParsingError, RateLimitError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Synchronous fetcher with a shared client, default headers and timeout."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 15.0,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.headers = {"User-Agent": user_agent, "Accept-Language": "en-US,en;q=0.9"}
        self.headers.update(headers or {})
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Issue a request and raise a typed error for anything but 2xx/3xx.

        Raises:
            NetworkError: Timeouts, connection failures, 5xx and other 4xx
            RateLimitError: 429 responses
            BlockedError: 401/403 responses
        """
        merged_headers = {**self.headers, **(headers or {})}
        try:
            response = self._client.request(
                method, url, params=params, headers=merged_headers, timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out after {self.timeout:.0f}s: {e}", url=url) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Connection failed: {e}", url=url) from e

        status = response.status_code
        if status == 429:
            raise RateLimitError("Too many requests (HTTP 429)", url=url)
        if status in (401, 403):
            raise BlockedError(f"Access denied (HTTP {status})", url=url)
        if status >= 400:
            error = NetworkError(f"HTTP {status} {response.reason_phrase}", url=url)
            # Client errors will not fix themselves on retry
            error.retryable = status >= 500
            raise error

        logger.debug(f"{method} {url} -> {status}")
        return response

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, params=params, **kwargs)

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        """GET and decode JSON, raising ParsingError on malformed bodies."""
        response = self.get(url, params=params, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ParsingError(f"Invalid JSON response: {e}", url=url) from e

    def get_text(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        return self.get(url, params=params, **kwargs).text

    def exists(self, url: str) -> bool:
        """HEAD probe; any failure counts as missing."""
        try:
            self.request("HEAD", url)
            return True
        except (NetworkError, RateLimitError, BlockedError) as e:
            logger.debug(f"HEAD {url} failed: {e}")
            return False
