"""Normalized catalog items.

Backend listings drift in how they name prices, images and sales counts. All
of that tolerance lives here: every raw mapping passes through
normalize_item() once at ingestion and the rest of the engine only sees Item.
"""

import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

ItemKey = int | str | None

PLACEHOLDER_IMAGE = "data:image/svg+xml;utf8," + quote(
    "<svg xmlns='http://www.w3.org/2000/svg' width='480' height='640'>"
    "<rect width='100%' height='100%' fill='#f3f4f6'/>"
    "<text x='50%' y='50%' dominant-baseline='middle' text-anchor='middle' "
    "font-family='Inter, system-ui, sans-serif' font-size='14' fill='#9ca3af'>"
    "No Image</text></svg>"
)

_SIGNED_URL = re.compile(r"[?&]X-Goog-Algorithm=")
_FIREBASE_URL = re.compile(r"firebasestorage\.googleapis\.com/v0/b/")
_ALT_MEDIA = re.compile(r"[?&]alt=media\b")


@dataclass(frozen=True)
class Item:
    """A catalog entry as the carousels see it.

    Attributes:
        id: Backend identifier, if the payload carried one.
        slug: Canonical slug used for routing, if known.
        title: Display title.
        original_price: List price before any discount.
        current_price: Price the customer pays now.
        discount_percent: Discount in percent. Reported values are kept as
            given; values derived from prices are rounded to whole percent.
        image: Resolved image URL (placeholder when none was found).
        sold: Units sold, if the backend reports it.
        raw: The untouched backend payload.
    """

    id: int | str | None = None
    slug: str | None = None
    title: str | None = None
    original_price: float | None = None
    current_price: float | None = None
    discount_percent: float | None = None
    image: str = PLACEHOLDER_IMAGE
    sold: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


def as_number(value: Any) -> float | int | None:
    """Return value if it is a finite number (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def as_text(value: Any) -> str | None:
    """Return value if it is a non-blank string, else None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def as_identifier(value: Any) -> int | str | None:
    """Return value if it can serve as a backend identifier, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def first_match(
    raw: Mapping[str, Any],
    candidates: Sequence[str],
    coerce: Callable[[Any], Any],
) -> Any:
    """Return the first candidate field whose value survives coerce."""
    for name in candidates:
        value = coerce(raw.get(name))
        if value is not None:
            return value
    return None


# semantic field -> (candidate payload fields in priority order, coercion)
FIELD_RESOLVERS: dict[str, tuple[tuple[str, ...], Callable[[Any], Any]]] = {
    "id": (("id", "bookId"), as_identifier),
    "slug": (("slug",), as_text),
    "title": (("title", "name"), as_text),
    "original_price": (("price",), as_number),
    "current_price": (("finalPrice", "salePrice", "price"), as_number),
    "discount_percent": (("discountPercent",), as_number),
    "sold": (("sold", "soldCount", "totalSold", "orderCount", "sales"), as_number),
    "image": (("thumbnail", "imageUrl"), as_text),
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def resolve_thumb(url: str | None, *, ensure_alt_media: bool = True) -> str:
    """Normalize an image URL so it can be used directly.

    Blank URLs become the placeholder, signed storage URLs are kept as-is and
    Firebase storage URLs get ``alt=media`` so they serve the file itself.
    """
    if not url or not url.strip():
        return PLACEHOLDER_IMAGE
    url = url.strip()
    if _SIGNED_URL.search(url):
        return url
    if ensure_alt_media and _FIREBASE_URL.search(url) and not _ALT_MEDIA.search(url):
        return url + ("&" if "?" in url else "?") + "alt=media"
    return url


def _gallery_image(raw: Mapping[str, Any]) -> str | None:
    images = raw.get("images")
    if not isinstance(images, list):
        return None
    entries = [img for img in images if isinstance(img, Mapping)]
    entries.sort(key=lambda img: as_number(img.get("sortOrder")) or 0)
    for img in entries:
        url = as_text(img.get("url"))
        if url:
            return url
    return None


def normalize_item(raw: Mapping[str, Any] | Item) -> Item:
    """Build an Item from a loosely-typed backend mapping.

    Items are returned unchanged so callers can pass mixed sequences.
    """
    if isinstance(raw, Item):
        return raw

    resolved = {
        name: first_match(raw, candidates, coerce)
        for name, (candidates, coerce) in FIELD_RESOLVERS.items()
    }

    original = resolved["original_price"]
    current = resolved["current_price"]
    discount = resolved["discount_percent"]
    derivable = original is not None and current is not None and original > current
    if discount is None and derivable:
        discount = round_half_up((original - current) / original * 100)

    image = resolved["image"] or _gallery_image(raw)
    sold = resolved["sold"]

    return Item(
        id=resolved["id"],
        slug=resolved["slug"],
        title=resolved["title"],
        original_price=original,
        current_price=current,
        discount_percent=discount,
        image=resolve_thumb(image),
        sold=int(sold) if sold is not None else None,
        raw=dict(raw),
    )


def item_key(item: Item) -> ItemKey:
    """Stable identity of an item: id, else slug, else title."""
    if item.id is not None:
        return item.id
    if item.slug is not None:
        return item.slug
    return item.title


def item_path(item: Item) -> str:
    """Storefront route for an item, preferring the canonical slug."""
    if item.slug:
        return f"/books/{item.slug}"
    return f"/books/id/{item.id if item.id is not None else ''}"


def discount_percent_of(item: Item) -> float:
    """Discount used by flash-sale rules; -1 when it cannot be known."""
    if item.discount_percent is not None:
        return item.discount_percent
    return -1
