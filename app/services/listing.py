from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.field_rules import FieldRuleConfig
from app.services.filter_validation import collect_filter_violations
from app.services.filtering import compile_filters
from app.services.pagination import PageResult, page_violations, paginate
from app.services.query_errors import QueryValidationError
from app.services.sorting import SORT_DIRECTIONS, apply_sorting, collect_sort_violations

_LOG = logging.getLogger("app.query")


@dataclass
class ListingRequest:
    filters: Any = field(default_factory=dict)
    sort: str | None = None
    page: Any = 1
    per_page: Any = None
    # HTTP callers set this from settings; the paginator itself has no upper bound.
    max_per_page: int | None = None

    def __post_init__(self):
        if self.per_page is None:
            self.per_page = settings.PAGINATION_DEFAULT_PER_PAGE


def list_resource(db: Session, model, config: FieldRuleConfig, request: ListingRequest) -> PageResult:
    """Validate, filter, sort and paginate ``model`` rows for one request.

    Violations in filters, filter values, sort and paging are reported together.
    """
    filters, violations = collect_filter_violations(request.filters, config)
    predicate, value_violations = compile_filters(model, filters, config)
    violations.extend(value_violations)
    sort_spec, sort_violations = collect_sort_violations(request.sort, config.sortable_fields, SORT_DIRECTIONS)
    violations.extend(sort_violations)
    violations.extend(page_violations(request.per_page, request.page, request.max_per_page))
    if violations:
        _LOG.info(
            "rejected listing resource=%s kinds=%s",
            config.resource,
            ",".join(v.kind for v in violations),
        )
        raise QueryValidationError(violations)

    q = db.query(model)
    if filters:
        q = q.filter(predicate)
    q = apply_sorting(q, model, sort_spec, config)
    result = paginate(q, request.per_page, request.page)
    _LOG.debug(
        "listed resource=%s filters=%d page=%d per_page=%d total=%d",
        config.resource,
        len(filters),
        result.page,
        result.per_page,
        result.total,
    )
    return result
