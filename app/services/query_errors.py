from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from fastapi import HTTPException

UNKNOWN_FIELD = "UnknownField"
UNKNOWN_OPERATOR = "UnknownOperator"
INVALID_VALUE_SHAPE = "InvalidValueShape"
MALFORMED_FILTER_ENTRY = "MalformedFilterEntry"
MALFORMED_SORT_TOKEN = "MalformedSortToken"
UNKNOWN_SORT_FIELD = "UnknownSortField"
UNKNOWN_SORT_DIRECTION = "UnknownSortDirection"
INVALID_PAGE = "InvalidPage"


@dataclass(frozen=True)
class QueryViolation:
    kind: str
    field: str
    message: str
    operator: str | None = None

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "field": self.field,
            "operator": self.operator,
            "message": self.message,
        }


class QueryValidationError(HTTPException):
    """Client supplied filters, sort or paging that cannot be applied.

    Carries every violation found so the caller can fix the request in one
    round trip. FastAPI renders it as a 422 with the violations as ``detail``.
    """

    def __init__(self, violations: Iterable[QueryViolation]):
        self.violations: list[QueryViolation] = list(violations)
        super().__init__(status_code=422, detail=[v.as_dict() for v in self.violations])

    @property
    def kinds(self) -> list[str]:
        return [v.kind for v in self.violations]


class InvalidOperator(LookupError):
    """Operator key outside the registry."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f'Unknown filter operator "{key}"')
