"""Error classification for catalog fetch failures.

Fetch failures never propagate out of a carousel. They are classified here so
the coordinator can log them with a category and tell the shell whether a
retry affordance makes sense.

Example:
    from carousel_engine.core.errors import classify_error, is_retryable

    try:
        page = await client.fetch_page(endpoint, params)
    except Exception as ex:
        category = classify_error(ex)
        show_retry = is_retryable(category)
"""

import asyncio
from enum import Enum, auto

import aiohttp


class ErrorCategory(Enum):
    """Classification of error types for handling decisions."""

    # Transient errors - a later attempt may succeed
    RATE_LIMIT = auto()  # API rate limiting
    TIMEOUT = auto()  # Request/operation timeout
    NETWORK = auto()  # Network connectivity issues
    SERVICE_UNAVAILABLE = auto()  # Temporary service outage (5xx)

    # Permanent errors - retrying will not help
    INVALID_INPUT = auto()  # Bad request data (4xx)
    AUTH_FAILURE = auto()  # Authentication/authorization error
    NOT_FOUND = auto()  # Resource not found
    UNKNOWN = auto()  # Unclassified error


RETRYABLE_CATEGORIES = {
    ErrorCategory.RATE_LIMIT,
    ErrorCategory.TIMEOUT,
    ErrorCategory.NETWORK,
    ErrorCategory.SERVICE_UNAVAILABLE,
}


def classify_status(status: int) -> ErrorCategory:
    """Map an HTTP status code to an error category."""
    if status == 429:
        return ErrorCategory.RATE_LIMIT
    if status == 408:
        return ErrorCategory.TIMEOUT
    if status >= 500:
        return ErrorCategory.SERVICE_UNAVAILABLE
    if status in (401, 403):
        return ErrorCategory.AUTH_FAILURE
    if status == 404:
        return ErrorCategory.NOT_FOUND
    if status >= 400:
        return ErrorCategory.INVALID_INPUT
    return ErrorCategory.UNKNOWN


def classify_error(error: BaseException) -> ErrorCategory:
    """Classify an exception into an error category.

    An HTTP status carried by the exception decides first, then the
    exception type (including the aiohttp error a client wrapped), and only
    then the message text.

    Args:
        error: The exception to classify.

    Returns:
        The ErrorCategory that best matches the error.
    """
    status = getattr(error, "status", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return classify_status(status)

    # ServerTimeoutError is also a connection error, so timeouts go first
    if isinstance(error, (TimeoutError, asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (ConnectionError, aiohttp.ClientConnectionError)):
        return ErrorCategory.NETWORK

    cause = error.__cause__
    if isinstance(cause, Exception):
        category = classify_error(cause)
        if category is not ErrorCategory.UNKNOWN:
            return category

    return _classify_message(str(error).lower())


def _classify_message(error_str: str) -> ErrorCategory:
    if "gateway timeout" in error_str:
        return ErrorCategory.SERVICE_UNAVAILABLE
    if "timed out" in error_str or "timeout" in error_str:
        return ErrorCategory.TIMEOUT
    if "connection" in error_str or "network" in error_str:
        return ErrorCategory.NETWORK

    if "rate" in error_str and "limit" in error_str:
        return ErrorCategory.RATE_LIMIT
    if "too many requests" in error_str:
        return ErrorCategory.RATE_LIMIT

    if "service unavailable" in error_str or "bad gateway" in error_str:
        return ErrorCategory.SERVICE_UNAVAILABLE
    if "internal server error" in error_str:
        return ErrorCategory.SERVICE_UNAVAILABLE

    if "unauthorized" in error_str or "forbidden" in error_str:
        return ErrorCategory.AUTH_FAILURE
    if "not found" in error_str:
        return ErrorCategory.NOT_FOUND

    if "bad request" in error_str:
        return ErrorCategory.INVALID_INPUT
    if "invalid" in error_str or "validation" in error_str:
        return ErrorCategory.INVALID_INPUT

    return ErrorCategory.UNKNOWN


def is_retryable(category: ErrorCategory) -> bool:
    """Check if an error category is worth offering a retry for.

    Args:
        category: The error category to check.

    Returns:
        True if the error is transient and a later attempt may succeed.
    """
    return category in RETRYABLE_CATEGORIES
