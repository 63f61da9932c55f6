"""Column-major bucketing of flat item lists for multi-row carousels."""

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def column_count(item_count: int, rows: int) -> int:
    """Number of columns needed to hold item_count items in rows rows."""
    return math.ceil(max(0, item_count) / max(1, rows))


def bucketize(items: Sequence[T], rows: int) -> list[list[T]]:
    """Split a flat list into columns of at most ``rows`` items.

    Column ``c`` row ``r`` holds flat index ``c + r * total_columns``, so
    the first row reads items ``0..total_columns-1`` left to right, the
    second row continues with the next ``total_columns`` items, and so on.
    With rows=1 this is the identity split into single-item columns.

    Args:
        items: Items in source order.
        rows: Rows per column (clamped to >= 1).

    Returns:
        The columns, each a new list; the input is never mutated.
    """
    rows = max(1, rows)
    total_columns = column_count(len(items), rows)
    columns: list[list[T]] = [[] for _ in range(total_columns)]
    for c in range(total_columns):
        for r in range(rows):
            index = c + r * total_columns
            if index < len(items):
                columns[c].append(items[index])
    return columns
