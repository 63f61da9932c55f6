"""Preset options for the storefront's carousel variants."""

from typing import Any

from carousel_engine.core.carousel import CarouselOptions
from carousel_engine.core.items import Item
from carousel_engine.core.page_merger import min_discount_filter, sort_by_discount_desc

FLASH_SALE_MIN_DISCOUNT = 20
FLASH_SALE_DEFAULT_PARAMS: dict[str, Any] = {
    "status": "ACTIVE",
    "sort": "createdAt",
    "direction": "DESC",
}


def flash_sale_options(
    *,
    page_size: int = 6,
    endpoint: str = "/books",
    params: dict[str, Any] | None = None,
    items: list[Item | dict[str, Any]] | None = None,
) -> CarouselOptions:
    """Single-row promotional carousel of deep discounts.

    Keeps items discounted by at least 20%, highest discount first, prefetches
    two columns before the end and loops back to the start when exhausted.
    """
    return CarouselOptions(
        name="flash_sale",
        rows=1,
        visible_columns=page_size,
        loop=True,
        gap=20,
        padding_x=12,
        min_column_width=210,
        near_end_threshold=2,
        page_size=page_size,
        domain_filter=min_discount_filter(FLASH_SALE_MIN_DISCOUNT),
        domain_sort=sort_by_discount_desc,
        endpoint=endpoint,
        params=dict(FLASH_SALE_DEFAULT_PARAMS if params is None else params),
        items=list(items or []),
    )


def product_carousel_options(
    *,
    rows: int = 1,
    cols: int = 6,
    endpoint: str | None = None,
    params: dict[str, Any] | None = None,
    items: list[Item | dict[str, Any]] | None = None,
    wheel_navigation: bool = True,
    empty_hint: str = "No products yet.",
) -> CarouselOptions:
    """Generic catalog carousel; stops at the end instead of looping."""
    return CarouselOptions(
        name="product",
        rows=rows,
        visible_columns=cols,
        loop=False,
        gap=16,
        padding_x=8,
        min_column_width=150,
        near_end_threshold=1,
        wheel_navigation=wheel_navigation,
        endpoint=endpoint,
        params=dict(params or {}),
        items=list(items or []),
        unmeasured_width=1200,
        empty_hint=empty_hint,
    )


def best_seller_options(items: list[Item | dict[str, Any]]) -> CarouselOptions:
    """Two-row looping carousel over a fixed best-seller list."""
    return CarouselOptions(
        name="best_seller",
        rows=2,
        visible_columns=6,
        loop=True,
        gap=20,
        padding_x=12,
        min_column_width=200,
        items=list(items),
    )
