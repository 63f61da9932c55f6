"""Merging of server pages into a carousel's local item list.

Merges are pure: existing and incoming sequences are never mutated, the
result is always a new list.

Example:
    merger = PageMerger(
        key_fn=item_key,
        domain_filter=min_discount_filter(20),
        domain_sort=sort_by_discount_desc,
    )
    items = merger.merge(items, page.content)
"""

from collections.abc import Callable, Hashable, Sequence
from typing import Generic, TypeVar

from carousel_engine.core.items import Item, discount_percent_of

T = TypeVar("T")

DomainFilter = Callable[[T], bool]
DomainSort = Callable[[Sequence[T]], list[T]]


def min_discount_filter(threshold: int) -> Callable[[Item], bool]:
    """Keep only items discounted by at least ``threshold`` percent."""

    def keep(item: Item) -> bool:
        return discount_percent_of(item) >= threshold

    return keep


def sort_by_discount_desc(items: Sequence[Item]) -> list[Item]:
    """Highest discount first; equal discounts keep their merged order."""
    return sorted(items, key=discount_percent_of, reverse=True)


def dedupe(items: Sequence[T], key_fn: Callable[[T], Hashable | None]) -> list[T]:
    """Drop later items whose key was already seen.

    Items whose key is None are always kept; a missing key says nothing
    about identity.
    """
    seen: set[Hashable] = set()
    out: list[T] = []
    for item in items:
        key = key_fn(item)
        if key is None:
            out.append(item)
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


class PageMerger(Generic[T]):
    """De-duplicating merge with optional domain filter and sort."""

    def __init__(
        self,
        key_fn: Callable[[T], Hashable | None],
        domain_filter: DomainFilter | None = None,
        domain_sort: DomainSort | None = None,
    ) -> None:
        """Initialize the merger.

        Args:
            key_fn: Returns the stable identity of an item (None if unknown).
            domain_filter: Predicate applied to the whole merged list, so a
                previously kept item that no longer qualifies is dropped.
            domain_sort: Reordering applied after filtering.
        """
        self.key_fn = key_fn
        self.domain_filter = domain_filter
        self.domain_sort = domain_sort

    def merge(self, existing: Sequence[T], incoming: Sequence[T]) -> list[T]:
        """Merge incoming after existing; first occurrence of a key wins.

        The result can be shorter than existing when a domain filter drops
        items that no longer qualify.
        """
        merged = dedupe([*existing, *incoming], self.key_fn)
        if self.domain_filter is not None:
            merged = [item for item in merged if self.domain_filter(item)]
        if self.domain_sort is not None:
            merged = list(self.domain_sort(merged))
        return merged

    def normalize(self, items: Sequence[T]) -> list[T]:
        """Apply de-duplication and domain rules to a standalone list."""
        return self.merge([], items)
