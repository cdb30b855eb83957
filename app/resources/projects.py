from app.models.project import PROJECT_STATUSES
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

PROJECT_FIELDS = field_rules(
    "projects",
    FieldRule("name", operators(text())),
    FieldRule("description", operators(text())),
    FieldRule("status", operators(text()), value_rule=one_of(*PROJECT_STATUSES)),
    FieldRule("owner_id", operators(equality(), membership(), comparison())),
    FieldRule("created_at", operators(dates())),
    FieldRule("updated_at", operators(dates())),
)
