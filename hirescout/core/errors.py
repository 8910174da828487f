"""
Error taxonomy for scraping and contact discovery.

Every failure the core records is tagged with one ErrorType so consumers can
tell a flaky network from a source that is actively blocking us.
"""

import json
from enum import Enum
from typing import Optional

import httpx


class ErrorType(str, Enum):
    """Categories of failure recorded in results."""

    NETWORK = "network"
    PARSING = "parsing"
    RATE_LIMIT = "rate_limit"
    BLOCKED = "blocked"
    VALIDATION = "validation"


class ScrapingError(Exception):
    """Base class for typed failures raised by fetchers and parsers."""

    error_type: ErrorType = ErrorType.NETWORK
    retryable: bool = True

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} ({self.url})"
        return self.message


class NetworkError(ScrapingError):
    """Connection failures, timeouts and server errors."""

    error_type = ErrorType.NETWORK


class ParsingError(ScrapingError):
    """Response could not be decoded into the expected structure."""

    error_type = ErrorType.PARSING
    retryable = False


class RateLimitError(ScrapingError):
    """Source answered with a throttling response."""

    error_type = ErrorType.RATE_LIMIT


class BlockedError(ScrapingError):
    """Source refused access (auth wall, captcha, forbidden)."""

    error_type = ErrorType.BLOCKED
    retryable = False


class RecordValidationError(ScrapingError):
    """A single scraped record failed schema validation."""

    error_type = ErrorType.VALIDATION
    retryable = False


_BLOCKED_MARKERS = ("403", "401", "forbidden", "captcha", "blocked", "access denied")
_RATE_LIMIT_MARKERS = ("429", "rate limit", "too many requests")
_NETWORK_MARKERS = ("timeout", "timed out", "connection", "network", "unreachable", "dns")


def classify_exception(exc: BaseException) -> ErrorType:
    """
    Map an arbitrary exception onto the error taxonomy.

    Typed errors keep their own category. Everything else is classified by
    exception type first and then by message, which is how third-party
    scraping libraries usually report what went wrong.
    """
    if isinstance(exc, ScrapingError):
        return exc.error_type

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 429:
            return ErrorType.RATE_LIMIT
        if status in (401, 403):
            return ErrorType.BLOCKED
        return ErrorType.NETWORK

    if isinstance(exc, (httpx.TransportError, TimeoutError, ConnectionError)):
        return ErrorType.NETWORK

    if isinstance(exc, (json.JSONDecodeError, KeyError, TypeError)):
        return ErrorType.PARSING

    message = str(exc).lower()
    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return ErrorType.RATE_LIMIT
    if any(marker in message for marker in _BLOCKED_MARKERS):
        return ErrorType.BLOCKED
    if any(marker in message for marker in _NETWORK_MARKERS):
        return ErrorType.NETWORK
    if isinstance(exc, ValueError):
        return ErrorType.PARSING
    return ErrorType.NETWORK


def is_retryable(exc: BaseException) -> bool:
    """Whether another attempt could plausibly succeed."""
    if isinstance(exc, ScrapingError):
        return exc.retryable
    return classify_exception(exc) in (ErrorType.NETWORK, ErrorType.RATE_LIMIT)
