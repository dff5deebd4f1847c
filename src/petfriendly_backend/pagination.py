"""
Page requests and result pages shared by repositories, services and routers.

A ``PageRequest`` mirrors the ``page``/``size``/``sort`` query parameters of
the ``/page`` endpoints. ``PageRequest.unpaged()`` selects every row, which is
what the plain list endpoints use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from fastapi import Query

from .configuration import get_settings
from .errors import ValidationError
from .models import PageResponse

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: Optional[int] = None
    sort: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def unpaged(cls, sort: Tuple[Tuple[str, str], ...] = ()) -> "PageRequest":
        return cls(page=0, size=None, sort=sort)

    @classmethod
    def of(cls, page: int, size: int, sort: Optional[str] = None) -> "PageRequest":
        return cls(page=page, size=size, sort=parse_sort(sort))

    @property
    def is_paged(self) -> bool:
        return self.size is not None

    @property
    def offset(self) -> int:
        return self.page * self.size if self.size else 0


def parse_sort(sort: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    """
    Parse ``field`` or ``field,asc|desc`` into ``((field, direction),)``.

    Several orderings can be chained with ``;``, e.g. ``name,asc;age,desc``.
    """
    if not sort:
        return ()
    orders = []
    for chunk in sort.split(";"):
        parts = [part.strip() for part in chunk.split(",") if part.strip()]
        if not parts:
            continue
        direction = parts[1].lower() if len(parts) > 1 else "asc"
        if direction not in {"asc", "desc"}:
            raise ValidationError(f"Invalid sort direction: {parts[1]}")
        orders.append((parts[0], direction))
    return tuple(orders)


@dataclass
class Page(Generic[T]):
    content: List[T]
    total_elements: int
    request: PageRequest

    @property
    def size(self) -> int:
        return self.request.size if self.request.is_paged else len(self.content)

    @property
    def total_pages(self) -> int:
        if not self.request.is_paged:
            return 1 if self.content else 0
        return math.ceil(self.total_elements / self.request.size) if self.request.size else 0

    def map(self, mapper: Callable[[T], R]) -> "Page[R]":
        return Page([mapper(item) for item in self.content], self.total_elements, self.request)

    def to_response(self) -> PageResponse:
        number = self.request.page
        return PageResponse(
            content=self.content,
            total_elements=self.total_elements,
            total_pages=self.total_pages,
            number=number,
            size=self.size,
            first=number == 0,
            last=number + 1 >= self.total_pages,
            number_of_elements=len(self.content),
            empty=not self.content,
        )


def page_params(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: Optional[int] = Query(None, ge=1, description="Page size"),
    sort: Optional[str] = Query(None, description="Sort as field or field,asc|desc"),
) -> PageRequest:
    """FastAPI dependency building a ``PageRequest`` from query parameters."""
    settings = get_settings()
    effective_size = min(size or settings.pagination.default_size, settings.pagination.max_size)
    return PageRequest.of(page, effective_size, sort)
