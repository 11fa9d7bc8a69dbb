"""API helper functions for routes."""

from typing import Any, Sequence, TypeVar

T = TypeVar("T")


def get_pagination_context(page: int, page_size: int, total: int) -> dict:
    """Calculate pagination metadata.

    Args:
        page: Current page number (1-indexed).
        page_size: Items per page.
        total: Total number of items.

    Returns:
        Dictionary with pagination metadata.
    """
    total_pages = (total + page_size - 1) // page_size if total > 0 else 1
    start = (page - 1) * page_size + 1 if total > 0 else 0
    end = min(page * page_size, total)

    return {
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": total_pages,
        "start": start,
        "end": end,
        "has_prev": page > 1,
        "has_next": page < total_pages,
    }


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], dict[str, Any]]:
    """Slice an already ordered result set into one page.

    Listings are ordered in Python (the weekly-grid key is computed at read
    time), so pages are cut after ordering rather than in SQL.

    Returns:
        (items of the page, pagination metadata)
    """
    offset = (page - 1) * page_size
    return list(items[offset : offset + page_size]), get_pagination_context(
        page, page_size, len(items)
    )
