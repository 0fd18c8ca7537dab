"""In-memory space filter and re-pagination.

``total_space_sqft`` holds several values per warehouse, so the min/max space
bounds are applied after retrieval. When they are, the page is re-sliced from
the over-fetched window and the total is the number of matches in that window:
exact while the window covers every match, an undercount otherwise.
"""

from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def space_matches(spaces: Iterable[int] | None, min_space: int | None, max_space: int | None) -> bool:
    """True if any single space value satisfies every active bound."""
    for space in spaces or ():
        if min_space is not None and space < min_space:
            continue
        if max_space is not None and space > max_space:
            continue
        return True
    return False


def paginate(
    records: Sequence[T],
    total: int,
    page: int,
    page_size: int,
    min_space: int | None = None,
    max_space: int | None = None,
    spaces_of=lambda record: record.total_space_sqft,
) -> tuple[list[T], int]:
    """Return ``(page_records, total_items)``.

    Without space bounds the store already paginated: records and total pass
    through unchanged.
    """
    if min_space is None and max_space is None:
        return list(records), total

    matched = [r for r in records if space_matches(spaces_of(r), min_space, max_space)]
    start = (page - 1) * page_size
    return matched[start:start + page_size], len(matched)
