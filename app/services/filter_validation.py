from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from app.services.field_rules import FieldRule, FieldRuleConfig
from app.services.filter_operators import DATE_RANGE, OPERATORS, STRING, is_scalar
from app.services.query_errors import (
    INVALID_VALUE_SHAPE,
    MALFORMED_FILTER_ENTRY,
    UNKNOWN_FIELD,
    UNKNOWN_OPERATOR,
    QueryValidationError,
    QueryViolation,
)

_LOG = logging.getLogger("app.query")


@dataclass(frozen=True)
class ValidatedFilter:
    field: str
    operator: str
    value: Any
    # Untouched condition for the whole field, as the client sent it.
    raw: Any = None


def _check_operator_value(rule: FieldRule, operator: str, value) -> tuple[Any, QueryViolation | None]:
    spec = OPERATORS[operator]
    try:
        normalized = spec.normalize(value)
        if rule.value_rule is not None:
            if isinstance(normalized, list):
                normalized = [rule.value_rule(item) for item in normalized]
            # like takes fragments and between takes a date range, not field values.
            elif spec.value_shape not in (DATE_RANGE, STRING):
                normalized = rule.value_rule(normalized)
    except ValueError as exc:
        return None, QueryViolation(
            kind=INVALID_VALUE_SHAPE,
            field=rule.field,
            operator=operator,
            message=f"The {operator} filter for {rule.field} is invalid: {exc}.",
        )
    return normalized, None


def collect_filter_violations(
    raw_filters: Any, config: FieldRuleConfig
) -> tuple[list[ValidatedFilter], list[QueryViolation]]:
    """Validate every entry of ``raw_filters`` without stopping at the first error."""
    validated: list[ValidatedFilter] = []
    violations: list[QueryViolation] = []

    if raw_filters is None:
        return validated, violations
    if not isinstance(raw_filters, Mapping):
        violations.append(
            QueryViolation(kind=MALFORMED_FILTER_ENTRY, field="filters", message="Filters must be an object.")
        )
        return validated, violations

    for field, conditions in raw_filters.items():
        field = str(field)
        rule = config.get(field)
        if rule is None:
            violations.append(
                QueryViolation(kind=UNKNOWN_FIELD, field=field, message=f"The field '{field}' is not allowed.")
            )
            continue

        if is_scalar(conditions):
            pairs = [("eq", conditions)]
        elif isinstance(conditions, Mapping):
            pairs = [(str(op), value) for op, value in conditions.items()]
        else:
            violations.append(
                QueryViolation(
                    kind=MALFORMED_FILTER_ENTRY,
                    field=field,
                    message=f"Filter conditions for '{field}' must be an object or a single value.",
                )
            )
            continue

        for operator, value in pairs:
            if not rule.allows(operator):
                violations.append(
                    QueryViolation(
                        kind=UNKNOWN_OPERATOR,
                        field=field,
                        operator=operator,
                        message=f"The operator '{operator}' is not allowed for field '{field}'.",
                    )
                )
                continue
            normalized, violation = _check_operator_value(rule, operator, value)
            if violation is not None:
                violations.append(violation)
                continue
            validated.append(ValidatedFilter(field=field, operator=operator, value=normalized, raw=conditions))

    return validated, violations


def validate_filters(raw_filters: Any, config: FieldRuleConfig) -> list[ValidatedFilter]:
    validated, violations = collect_filter_violations(raw_filters, config)
    if violations:
        _LOG.info(
            "rejected filters resource=%s kinds=%s",
            config.resource,
            ",".join(v.kind for v in violations),
        )
        raise QueryValidationError(violations)
    return validated
