from sqlalchemy import and_, or_, true

from app.models.team import TEAM_STATUSES
from app.services.field_rules import (
    FieldRule,
    comparison,
    dates,
    equality,
    field_rules,
    membership,
    one_of,
    operators,
    text,
)
from app.services.filtering import escape_like


def filter_search(model, conditions):
    # Accepts "term", {"eq": "term"} or {"like": "term"}; matches name or description.
    if isinstance(conditions, dict):
        terms = [conditions[op] for op in ("eq", "like") if conditions.get(op) is not None]
    else:
        terms = [] if conditions is None else [conditions]
    clauses = []
    for term in terms:
        pattern = f"%{escape_like(str(term))}%"
        clauses.append(or_(model.name.like(pattern, escape="\\"), model.description.like(pattern, escape="\\")))
    if not clauses:
        return true()
    return and_(*clauses)


TEAM_FIELDS = field_rules(
    "teams",
    FieldRule("name", operators(text())),
    FieldRule("description", operators(text())),
    FieldRule("status", operators(equality(), membership()), value_rule=one_of(*TEAM_STATUSES)),
    FieldRule("members_count", operators(equality(), membership(), comparison())),
    FieldRule("search", operators(("eq", "like")), sortable=False, predicate=filter_search),
    FieldRule("created_at", operators(dates())),
    FieldRule("updated_at", operators(dates())),
)
