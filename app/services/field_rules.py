from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from sqlalchemy.sql.elements import ColumnElement

from app.services.filter_operators import get_operator

ValueRule = Callable[[Any], Any]
PredicateOverride = Callable[[type, Any], ColumnElement]


@dataclass(frozen=True)
class FieldRule:
    field: str
    operators: frozenset[str]
    value_rule: ValueRule | None = None
    sortable: bool = True
    # Escape hatch: when set, the translator hands the raw condition value to
    # this callable instead of mapping operators to predicates.
    predicate: PredicateOverride | None = None
    column: str | None = None

    def __post_init__(self):
        for key in self.operators:
            get_operator(key)

    @property
    def column_name(self) -> str:
        return self.column or self.field

    def allows(self, operator: str) -> bool:
        return operator in self.operators


@dataclass(frozen=True)
class FieldRuleConfig(Mapping[str, FieldRule]):
    """Per-resource whitelist of filterable and sortable fields."""

    resource: str
    rules: Mapping[str, FieldRule] = dc_field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))

    def __getitem__(self, key: str) -> FieldRule:
        return self.rules[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def sortable_fields(self) -> frozenset[str]:
        return frozenset(name for name, rule in self.rules.items() if rule.sortable)


def field_rules(resource: str, *rules: FieldRule) -> FieldRuleConfig:
    by_name: dict[str, FieldRule] = {}
    for rule in rules:
        if rule.field in by_name:
            raise ValueError(f'Field "{rule.field}" declared twice for resource "{resource}"')
        by_name[rule.field] = rule
    return FieldRuleConfig(resource=resource, rules=by_name)


def operators(*groups: Iterable[str]) -> frozenset[str]:
    merged: set[str] = set()
    for group in groups:
        merged.update(group)
    return frozenset(merged)


def equality() -> tuple[str, ...]:
    return ("eq", "ne")


def membership() -> tuple[str, ...]:
    return ("in", "nin")


def comparison() -> tuple[str, ...]:
    return ("gt", "gte", "lt", "lte")


def text() -> tuple[str, ...]:
    return equality() + membership() + ("like",)


def dates() -> tuple[str, ...]:
    return ("between",)


def one_of(*choices: Any) -> ValueRule:
    allowed = tuple(choices)

    def _rule(value):
        if value is not None and value not in allowed:
            raise ValueError("expected one of: " + ", ".join(str(c) for c in allowed))
        return value

    return _rule
