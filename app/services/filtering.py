"""Turn validated filters into SQLAlchemy predicates.

All terms are combined with AND; there is no OR support across fields.

Per-field overrides: a ``FieldRule`` may carry a ``predicate`` callable. When
present it fully replaces the operator mapping for that field, is called once
with the model and the raw condition value exactly as the client sent it, and
must return a single SQLAlchemy boolean expression. Use it for
resource-specific logic (search across several columns, joins, computed
values); validation of the field's operators still happens beforehand.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Sequence

from sqlalchemy import and_, true
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from app.services.field_rules import FieldRuleConfig
from app.services.filter_operators import parse_date_range
from app.services.filter_validation import ValidatedFilter
from app.services.query_errors import INVALID_VALUE_SHAPE, QueryValidationError, QueryViolation


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _bad_value(f: ValidatedFilter, kind: str) -> QueryValidationError:
    return QueryValidationError(
        [
            QueryViolation(
                kind=INVALID_VALUE_SHAPE,
                field=f.field,
                operator=f.operator,
                message=f"The {f.operator} filter for {f.field} is invalid: expected a {kind}.",
            )
        ]
    )


def _column_python_type(col):
    try:
        return col.property.columns[0].type.python_type
    except (AttributeError, IndexError, NotImplementedError):
        return None


def _coerce_one(f: ValidatedFilter, python_type, value):
    if value is None or python_type is None or isinstance(value, python_type):
        return value
    if python_type is str:
        return str(value)
    if python_type is bool:
        text = str(value).strip().lower()
        if text in {"1", "true", "yes", "y"}:
            return True
        if text in {"0", "false", "no", "n"}:
            return False
        raise _bad_value(f, "boolean")
    try:
        if python_type is int:
            if isinstance(value, float) and not value.is_integer():
                return value
            return int(str(value).strip()) if isinstance(value, str) else int(value)
        if python_type is float:
            return float(value)
        if python_type is Decimal:
            return Decimal(str(value).strip())
        if python_type is uuid.UUID:
            return uuid.UUID(str(value).strip())
        if python_type is datetime:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        if python_type is date:
            return date.fromisoformat(str(value).strip())
    except (ValueError, TypeError, InvalidOperation):
        raise _bad_value(f, python_type.__name__)
    return value


def coerce_filter_value(col, f: ValidatedFilter):
    """Convert client values (often query-string text) to the column's Python type."""
    python_type = _column_python_type(col)
    if isinstance(f.value, list):
        return [_coerce_one(f, python_type, item) for item in f.value]
    return _coerce_one(f, python_type, f.value)


def _column(model, config: FieldRuleConfig, field: str):
    col = getattr(model, config[field].column_name, None)
    if col is None:
        raise AttributeError(f'{model.__name__} has no column for filter field "{field}"')
    return col


def operator_predicate(col, f: ValidatedFilter) -> ColumnElement:
    op = f.operator
    if op == "like":
        return col.like(f"%{escape_like(f.value)}%", escape="\\")
    if op == "between":
        try:
            start, end = parse_date_range(f.value)
        except ValueError:
            raise _bad_value(f, 'string in the format "start_date,end_date"')
        return col.between(start, end)
    value = coerce_filter_value(col, f)
    if op == "eq":
        return col.is_(None) if value is None else col == value
    if op == "ne":
        return col.is_not(None) if value is None else col != value
    if op == "gt":
        return col > value
    if op == "gte":
        return col >= value
    if op == "lt":
        return col < value
    if op == "lte":
        return col <= value
    if op == "in":
        return col.in_(value)
    if op == "nin":
        return col.not_in(value)
    raise ValueError(f"Unsupported operator: {op}")


def compile_filters(
    model, filters: Sequence[ValidatedFilter], config: FieldRuleConfig
) -> tuple[ColumnElement, list[QueryViolation]]:
    """Build the AND predicate, collecting value errors instead of stopping at the first."""
    terms: list[ColumnElement] = []
    violations: list[QueryViolation] = []
    overridden: set[str] = set()
    for f in filters:
        rule = config[f.field]
        if rule.predicate is not None:
            if f.field in overridden:
                continue
            overridden.add(f.field)
            terms.append(rule.predicate(model, f.raw))
            continue
        try:
            terms.append(operator_predicate(_column(model, config, f.field), f))
        except QueryValidationError as exc:
            violations.extend(exc.violations)
    if not terms:
        return true(), violations
    return and_(*terms), violations


def build_predicate(model, filters: Sequence[ValidatedFilter], config: FieldRuleConfig) -> ColumnElement:
    predicate, violations = compile_filters(model, filters, config)
    if violations:
        raise QueryValidationError(violations)
    return predicate


def apply_filters(q: Query, model, filters: Sequence[ValidatedFilter], config: FieldRuleConfig) -> Query:
    if not filters:
        return q
    return q.filter(build_predicate(model, filters, config))
