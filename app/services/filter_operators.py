"""Canonical filter operators and the value shapes they accept.

Every operator a resource may expose is declared here once. Value shape
checks return the value the translator should use (numeric strings are
coerced for comparison operators) and raise ``ValueError`` with a short
human readable reason otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from app.services.query_errors import InvalidOperator

SCALAR = "scalar"
NUMERIC = "numeric"
ARRAY = "array"
STRING = "string"
DATE_RANGE = "date_range"

SCALAR_TYPES = (str, int, float, bool, Decimal)


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, SCALAR_TYPES)


def _check_scalar(value):
    if not is_scalar(value):
        raise ValueError("expected a single value")
    return value


def _check_numeric(value):
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValueError("expected a number")
    else:
        raise ValueError("expected a number")
    if not number.is_finite():
        raise ValueError("expected a finite number")
    return float(number)


def _check_array(value):
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of values")
    if not value:
        raise ValueError("expected a non-empty list of values")
    for item in value:
        if item is None or not is_scalar(item):
            raise ValueError("list items must be single non-null values")
    return list(value)


def _check_string(value):
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value


def parse_filter_date(raw: str) -> date:
    """Parse an ISO date or datetime literal and return its calendar date."""
    text = str(raw or "").strip()
    if not text:
        raise ValueError("empty date")
    if "T" in text or " " in text:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def parse_date_range(value) -> tuple[datetime, datetime]:
    """Split ``"start,end"`` into an inclusive start-of-day/end-of-day window."""
    if not isinstance(value, str):
        raise ValueError('expected a string in the format "start_date,end_date"')
    parts = value.split(",")
    if len(parts) != 2:
        raise ValueError('expected a string in the format "start_date,end_date"')
    try:
        start = parse_filter_date(parts[0])
        end = parse_filter_date(parts[1])
    except ValueError:
        raise ValueError('both bounds must be valid dates in the format "start_date,end_date"')
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def _check_date_range(value):
    parse_date_range(value)
    return value


@dataclass(frozen=True)
class OperatorSpec:
    key: str
    value_shape: str
    sql_form: str
    check: Callable[[Any], Any]

    def normalize(self, value):
        return self.check(value)


OPERATORS: dict[str, OperatorSpec] = {
    spec.key: spec
    for spec in (
        OperatorSpec("eq", SCALAR, "=", _check_scalar),
        OperatorSpec("ne", SCALAR, "!=", _check_scalar),
        OperatorSpec("gt", NUMERIC, ">", _check_numeric),
        OperatorSpec("gte", NUMERIC, ">=", _check_numeric),
        OperatorSpec("lt", NUMERIC, "<", _check_numeric),
        OperatorSpec("lte", NUMERIC, "<=", _check_numeric),
        OperatorSpec("in", ARRAY, "in", _check_array),
        OperatorSpec("nin", ARRAY, "not in", _check_array),
        OperatorSpec("like", STRING, "like", _check_string),
        OperatorSpec("between", DATE_RANGE, "between", _check_date_range),
    )
}


def get_operator(key: str) -> OperatorSpec:
    spec = OPERATORS.get(key)
    if spec is None:
        raise InvalidOperator(key)
    return spec
