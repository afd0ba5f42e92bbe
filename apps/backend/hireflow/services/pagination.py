"""Fixed-size, 1-indexed pagination over filtered lists."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from hireflow.config import settings

T = TypeVar("T")

PAGE_SIZE = settings.page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total: int
    total_pages: int


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp into [1, total_pages]; an empty list still has page 1."""
    return min(max(page, 1), max(total_pages, 1))


def paginate(items: Sequence[T], page: int = 1, page_size: int = PAGE_SIZE) -> Page[T]:
    total_pages = page_count(len(items), page_size)
    page = clamp_page(page, total_pages)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total=len(items),
        total_pages=total_pages,
    )
