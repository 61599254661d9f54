"""Grid packing for notification summary facts.

Picks a column count between ``min_columns`` and ``max_columns`` so the
grid comes out as close to square as the item count allows:

- prefer a column count that divides the item count exactly, and among
  those the largest one (fewest rows)
- with no exact divisor in range fall back to ``min_columns`` and leave
  the last row partially filled
"""

from dataclasses import dataclass
from math import ceil
from typing import Generic, Optional, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_MIN_COLUMNS = 2
DEFAULT_MAX_COLUMNS = 4


@dataclass(frozen=True)
class GridLayout(Generic[T]):
    """Rows of equal width; ``None`` marks an empty padding cell."""

    columns: int
    rows: list[list[Optional[T]]]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def empty_cells(self) -> int:
        return sum(1 for row in self.rows for cell in row if cell is None)


def choose_columns(
    count: int,
    min_columns: int = DEFAULT_MIN_COLUMNS,
    max_columns: int = DEFAULT_MAX_COLUMNS,
) -> int:
    """Return the column count for ``count`` items."""
    if min_columns < 1 or max_columns < min_columns:
        raise ValueError(f"Invalid column bounds: {min_columns}..{max_columns}")

    divisors = [i for i in range(min_columns, max_columns + 1) if count % i == 0]
    if len(divisors) > 1:
        fewest_rows = min(count // i for i in divisors)
        divisors = [i for i in divisors if count // i == fewest_rows]

    if not divisors:
        return min_columns
    return min(max_columns, max(min_columns, max(divisors)))


def layout(
    items: Sequence[T],
    min_columns: int = DEFAULT_MIN_COLUMNS,
    max_columns: int = DEFAULT_MAX_COLUMNS,
    columns: int | None = None,
) -> GridLayout[T]:
    """
    Lay ``items`` out row by row.

    Args:
        items: Cells in reading order
        min_columns: Lower column bound
        max_columns: Upper column bound
        columns: Forced column count, bypasses the divisor search

    Returns:
        ``ceil(len(items) / columns)`` rows, the last one right-padded
        with ``None``
    """
    if columns is not None:
        if columns < 1:
            raise ValueError(f"Column count must be positive, got {columns}")
        width = columns
    else:
        width = choose_columns(len(items), min_columns, max_columns)

    rows: list[list[Optional[T]]] = []
    for r in range(ceil(len(items) / width)):
        row: list[Optional[T]] = list(items[r * width:(r + 1) * width])
        row.extend([None] * (width - len(row)))
        rows.append(row)

    return GridLayout(columns=width, rows=rows)
