"""Response envelopes shared by all resources."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata, as computed by get_pagination_context()."""

    page: int
    page_size: int
    total: int
    total_pages: int
    start: int
    end: int
    has_prev: bool
    has_next: bool


class Page(BaseModel, Generic[T]):
    """One page of an ordered listing."""

    data: list[T]
    meta: PaginationMeta


class Envelope(BaseModel, Generic[T]):
    """Single resource (or unpaginated collection) wrapped under ``data``."""

    data: T
