"""Tests for environment-driven settings."""

from unittest.mock import patch

import pytest

from carousel_engine.core.banner import BannerAutoplay, InfiniteBannerCursor
from carousel_engine.core.carousel import Carousel, CarouselOptions
from carousel_engine.core.config import (
    DEFAULT_API_PREFIX,
    DEFAULT_BANNER_INTERVAL,
    DEFAULT_DETAIL_CACHE_TTL,
    DEFAULT_FETCH_ERROR_MESSAGE,
    Settings,
    load_settings,
)
from carousel_engine.core.ranking_prefetch import InMemoryDetailCache, RankingPrefetcher
from carousel_engine.core.variants import flash_sale_options
from tests.mocks.catalog import MockCatalogClient, MockDetailClient, books
from tests.mocks.clock import FakeClock


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self) -> None:
        """Should fall back to defaults with an empty environment."""
        with patch.dict("os.environ", {}, clear=True):
            settings = load_settings()
        assert settings == Settings()
        assert settings.api_prefix == DEFAULT_API_PREFIX
        assert settings.detail_cache_ttl == DEFAULT_DETAIL_CACHE_TTL
        assert settings.banner_interval == DEFAULT_BANNER_INTERVAL
        assert settings.fetch_error_message == DEFAULT_FETCH_ERROR_MESSAGE

    def test_reads_environment(self) -> None:
        """Should read every setting from its environment variable."""
        env = {
            "CATALOG_API_BASE_URL": "https://shop.test",
            "CATALOG_API_PREFIX": "/api/v2",
            "CATALOG_REQUEST_TIMEOUT": "5",
            "DETAIL_CACHE_TTL_SECONDS": "60",
            "BANNER_INTERVAL_SECONDS": "4.5",
            "CAROUSEL_FETCH_ERROR_MESSAGE": "Không tải được dữ liệu.",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = load_settings()
        assert settings.api_base_url == "https://shop.test"
        assert settings.api_prefix == "/api/v2"
        assert settings.request_timeout == 5.0
        assert settings.detail_cache_ttl == 60.0
        assert settings.banner_interval == 4.5
        assert settings.fetch_error_message == "Không tải được dữ liệu."

    def test_invalid_number_raises(self) -> None:
        """Should raise ValueError for non-numeric values."""
        with patch.dict("os.environ", {"CATALOG_REQUEST_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(ValueError):
                load_settings()

    def test_settings_are_frozen(self) -> None:
        """Should not allow mutation after construction."""
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.api_prefix = "/other"  # type: ignore[misc]


class TestSettingsConsumers:
    """Settings flow into the components that read them."""

    def test_carousel_options_use_error_message(self) -> None:
        settings = Settings(fetch_error_message="Không tải được dữ liệu.")
        options = flash_sale_options().with_settings(settings)
        assert options.error_message == "Không tải được dữ liệu."
        assert options.name == "flash_sale"

    @pytest.mark.asyncio
    async def test_failed_fetch_shows_configured_message(self) -> None:
        settings = Settings(fetch_error_message="Try again later")
        client = MockCatalogClient([books(1, 6)], failures={0: ConnectionError()})
        carousel = Carousel(
            CarouselOptions(endpoint="/books").with_settings(settings), client=client
        )
        await carousel.mount()
        assert carousel.view().error == "Try again later"

    def test_banner_autoplay_uses_interval(self) -> None:
        settings = Settings(banner_interval=4.5)
        autoplay = BannerAutoplay.from_settings(settings, InfiniteBannerCursor(["a", "b"]))
        assert autoplay.interval == 4.5
        assert not autoplay.running

    @pytest.mark.asyncio
    async def test_ranking_prefetcher_uses_ttl(
        self, detail_client: MockDetailClient, clock: FakeClock
    ) -> None:
        settings = Settings(detail_cache_ttl=60)
        prefetcher = RankingPrefetcher.from_settings(
            settings, detail_client, InMemoryDetailCache(), clock=clock
        )
        await prefetcher.prefetch(1)
        clock.advance(59)
        assert prefetcher.is_fresh(1)
        clock.advance(2)
        assert not prefetcher.is_fresh(1)
