from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.config import settings
from app.services.field_rules import FieldRuleConfig
from app.services.query_errors import (
    MALFORMED_SORT_TOKEN,
    UNKNOWN_SORT_DIRECTION,
    UNKNOWN_SORT_FIELD,
    QueryValidationError,
    QueryViolation,
)

_LOG = logging.getLogger("app.query")

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class SortClause:
    field: str
    direction: str | None = "desc"


def collect_sort_violations(
    raw_sort: str | None,
    allowed_fields: Iterable[str],
    allowed_directions: Iterable[str] = SORT_DIRECTIONS,
) -> tuple[list[SortClause] | None, list[QueryViolation]]:
    """Parse ``"field:direction,field2:direction2"``.

    Returns ``None`` instead of clauses when the sort string is absent or blank so the
    caller can fall back to the default order.
    """
    if raw_sort is None or not str(raw_sort).strip():
        return None, []

    fields = set(allowed_fields)
    directions = {d.lower() for d in allowed_directions}
    clauses: list[SortClause] = []
    violations: list[QueryViolation] = []

    for token in str(raw_sort).split(","):
        parts = token.split(":")
        if len(parts) != 2:
            violations.append(
                QueryViolation(
                    kind=MALFORMED_SORT_TOKEN,
                    field="sort",
                    message=f"The sort token '{token.strip()}' is invalid. It should be 'field:direction'.",
                )
            )
            continue
        field, direction = parts[0].strip(), parts[1].strip().lower()
        if field not in fields:
            violations.append(
                QueryViolation(kind=UNKNOWN_SORT_FIELD, field=field, message=f"The sort field '{field}' is not allowed.")
            )
            continue
        if direction not in directions:
            violations.append(
                QueryViolation(
                    kind=UNKNOWN_SORT_DIRECTION,
                    field=field,
                    message=f"The sort direction '{direction}' is not allowed for field '{field}'.",
                )
            )
            continue
        clauses.append(SortClause(field=field, direction=direction))

    return clauses, violations


def parse_sort(
    raw_sort: str | None,
    allowed_fields: Iterable[str],
    allowed_directions: Iterable[str] = SORT_DIRECTIONS,
) -> list[SortClause] | None:
    clauses, violations = collect_sort_violations(raw_sort, allowed_fields, allowed_directions)
    if violations:
        _LOG.info("rejected sort value=%r kinds=%s", raw_sort, ",".join(v.kind for v in violations))
        raise QueryValidationError(violations)
    return clauses


def default_sort() -> list[SortClause]:
    return [SortClause(field=settings.DEFAULT_SORT_FIELD, direction=settings.DEFAULT_SORT_DIRECTION)]


def apply_sorting(
    q: Query,
    model,
    sort_spec: Sequence[SortClause] | None,
    config: FieldRuleConfig | None = None,
) -> Query:
    clauses = default_sort() if sort_spec is None else sort_spec
    for s in clauses:
        column_name = s.field
        if config is not None and s.field in config:
            column_name = config[s.field].column_name
        col = getattr(model, column_name)
        q = q.order_by(asc(col) if s.direction == "asc" else desc(col))
    return q
