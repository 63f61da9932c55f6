"""Core carousel engine.

This module contains the platform-agnostic windowing, pagination and
geometry logic shared by every storefront carousel.
"""

from carousel_engine.core.banner import BannerAutoplay, InfiniteBannerCursor
from carousel_engine.core.bucketing import bucketize, column_count
from carousel_engine.core.carousel import (
    Carousel,
    CarouselOptions,
    CarouselView,
    Skeleton,
)
from carousel_engine.core.carousel_logic import WindowCursor, WindowState
from carousel_engine.core.config import Settings, load_settings
from carousel_engine.core.errors import (
    ErrorCategory,
    classify_error,
    classify_status,
    is_retryable,
)
from carousel_engine.core.fetch_coordinator import (
    UNKNOWN_TOTAL_PAGES,
    FetchCoordinator,
    FetchState,
    FetchStatus,
    QueryFingerprint,
)
from carousel_engine.core.geometry import (
    Geometry,
    GeometryResolver,
    GeometrySpec,
    resolve_geometry,
)
from carousel_engine.core.items import (
    Item,
    discount_percent_of,
    item_key,
    item_path,
    normalize_item,
)
from carousel_engine.core.logging import (
    bind_page_context,
    clear_page_context,
    configure_logging,
    get_logger,
    page_context,
)
from carousel_engine.core.navigation import Step, key_to_step, wheel_to_step
from carousel_engine.core.page_merger import (
    PageMerger,
    min_discount_filter,
    sort_by_discount_desc,
)
from carousel_engine.core.ranking_prefetch import (
    CacheEntry,
    DetailCache,
    InMemoryDetailCache,
    RankingBoard,
    RankingPrefetcher,
    RankingRow,
    group_rankings,
)
from carousel_engine.core.variants import (
    best_seller_options,
    flash_sale_options,
    product_carousel_options,
)

__all__ = [
    # Banner
    "BannerAutoplay",
    "InfiniteBannerCursor",
    # Bucketing
    "bucketize",
    "column_count",
    # Carousel
    "Carousel",
    "CarouselOptions",
    "CarouselView",
    "Skeleton",
    "WindowCursor",
    "WindowState",
    # Configuration
    "Settings",
    "load_settings",
    # Error handling
    "ErrorCategory",
    "classify_error",
    "classify_status",
    "is_retryable",
    # Fetching
    "UNKNOWN_TOTAL_PAGES",
    "FetchCoordinator",
    "FetchState",
    "FetchStatus",
    "QueryFingerprint",
    # Geometry
    "Geometry",
    "GeometryResolver",
    "GeometrySpec",
    "resolve_geometry",
    # Items
    "Item",
    "discount_percent_of",
    "item_key",
    "item_path",
    "normalize_item",
    # Logging
    "bind_page_context",
    "clear_page_context",
    "configure_logging",
    "get_logger",
    "page_context",
    # Navigation
    "Step",
    "key_to_step",
    "wheel_to_step",
    # Merging
    "PageMerger",
    "min_discount_filter",
    "sort_by_discount_desc",
    # Rankings
    "CacheEntry",
    "DetailCache",
    "InMemoryDetailCache",
    "RankingBoard",
    "RankingPrefetcher",
    "RankingRow",
    "group_rankings",
    # Variants
    "best_seller_options",
    "flash_sale_options",
    "product_carousel_options",
]
