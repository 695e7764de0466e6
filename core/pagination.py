"""
core/pagination.py -- Page arithmetic shared by every paginated listing.

Contract:
  page and limit default to 1 and 10 when unset or zero.
  page is capped at MAX_PAGE and limit at MAX_LIMIT.
  skip = (page - 1) * limit
  total_pages = ceil(total / limit)
  An empty page is a successful result, never an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from core.errors import BadRequest

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE = 1_000_000
MAX_LIMIT = 1_000


@dataclass
class Page(Generic[T]):
    """One page of results plus the metadata clients need to fetch the next."""

    page: int
    total_pages: int
    items: list[T] = field(default_factory=list)


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def build(self, items: list[T], total: int) -> Page[T]:
        return Page(page=self.page, total_pages=math.ceil(total / self.limit), items=items)


def page_window(page: Optional[int], limit: Optional[int]) -> PageWindow:
    """Resolve raw page/limit input into a PageWindow.

    Falsy values fall back to the defaults. Negative values and values above
    MAX_PAGE / MAX_LIMIT are rejected; the resulting OFFSET must stay a valid
    64-bit integer.
    """
    if (page is not None and page < 0) or (limit is not None and limit < 0):
        raise BadRequest("page and limit must not be negative")
    if (page is not None and page > MAX_PAGE) or (limit is not None and limit > MAX_LIMIT):
        raise BadRequest(f"page must be at most {MAX_PAGE} and limit at most {MAX_LIMIT}")
    return PageWindow(page=page or DEFAULT_PAGE, limit=limit or DEFAULT_LIMIT)
