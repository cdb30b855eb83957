from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from sqlalchemy.orm import Query

from app.services.query_errors import INVALID_PAGE, QueryValidationError, QueryViolation

T = TypeVar("T")


@dataclass(frozen=True)
class PageResult(Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total: int
    total_pages: int

    @property
    def first_item(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)

    def to_envelope(self, serializer: Callable[[T], Any]) -> dict:
        return {
            "data": [serializer(item) for item in self.items],
            "meta": {
                "current_page": self.page,
                "per_page": self.per_page,
                "total": self.total,
                "last_page": self.total_pages,
                "from": self.first_item,
                "to": self.last_item,
            },
        }


def page_violations(per_page: Any, page: Any, max_per_page: int | None = None) -> list[QueryViolation]:
    violations: list[QueryViolation] = []
    if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page < 1:
        violations.append(
            QueryViolation(kind=INVALID_PAGE, field="per_page", message="per_page must be an integer greater than or equal to 1.")
        )
    elif max_per_page is not None and per_page > max_per_page:
        violations.append(
            QueryViolation(kind=INVALID_PAGE, field="per_page", message=f"per_page must not be greater than {max_per_page}.")
        )
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        violations.append(
            QueryViolation(kind=INVALID_PAGE, field="page", message="page must be an integer greater than or equal to 1.")
        )
    return violations


def total_pages_for(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))


def paginate(q: Query, per_page: int, page: int) -> PageResult:
    violations = page_violations(per_page, page)
    if violations:
        raise QueryValidationError(violations)
    total = q.order_by(None).count()
    items = q.offset((page - 1) * per_page).limit(per_page).all()
    return PageResult(
        items=items,
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages_for(total, per_page),
    )
