"""Environment-driven settings for the carousel engine.

Example:
    from carousel_engine.core.config import load_settings

    settings = load_settings()
    client = CatalogAPIClient(settings.api_base_url, prefix=settings.api_prefix)
"""

import os
from dataclasses import dataclass

DEFAULT_API_BASE_URL = "http://localhost:8080"
DEFAULT_API_PREFIX = "/api/v1"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_DETAIL_CACHE_TTL = 120.0  # 2 minutes
DEFAULT_BANNER_INTERVAL = 3.0
DEFAULT_FETCH_ERROR_MESSAGE = "Could not load data."


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by every carousel on a page.

    Attributes:
        api_base_url: Scheme and host of the catalog backend.
        api_prefix: Path prefix added to endpoints that lack one.
        request_timeout: Total timeout for a single catalog request (seconds).
        detail_cache_ttl: How long a prefetched detail record stays fresh.
        banner_interval: Seconds between banner auto-advance ticks.
        fetch_error_message: Short localized line shown under a carousel
            whose page fetch failed.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    api_prefix: str = DEFAULT_API_PREFIX
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    detail_cache_ttl: float = DEFAULT_DETAIL_CACHE_TTL
    banner_interval: float = DEFAULT_BANNER_INTERVAL
    fetch_error_message: str = DEFAULT_FETCH_ERROR_MESSAGE


def load_settings() -> Settings:
    """Build Settings from environment variables, falling back to defaults.

    Raises:
        ValueError: If a numeric variable is set but not a number.
    """
    return Settings(
        api_base_url=os.getenv("CATALOG_API_BASE_URL", DEFAULT_API_BASE_URL),
        api_prefix=os.getenv("CATALOG_API_PREFIX", DEFAULT_API_PREFIX),
        request_timeout=float(
            os.getenv("CATALOG_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
        ),
        detail_cache_ttl=float(
            os.getenv("DETAIL_CACHE_TTL_SECONDS", str(DEFAULT_DETAIL_CACHE_TTL))
        ),
        banner_interval=float(
            os.getenv("BANNER_INTERVAL_SECONDS", str(DEFAULT_BANNER_INTERVAL))
        ),
        fetch_error_message=os.getenv(
            "CAROUSEL_FETCH_ERROR_MESSAGE", DEFAULT_FETCH_ERROR_MESSAGE
        ),
    )
