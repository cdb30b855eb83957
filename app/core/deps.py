from fastapi import Request

from app.core.config import settings
from app.services.listing import ListingRequest
from app.services.query_params import parse_nested_params


def _int_or_raw(value):
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return value


def get_listing_request(request: Request) -> ListingRequest:
    """Read ``filters[...]``, ``sort``, ``page`` and ``per_page`` from the query string."""
    params = parse_nested_params(request.query_params.multi_items())
    page = _int_or_raw(params.get("page"))
    return ListingRequest(
        filters=params.get("filters", {}),
        sort=params.get("sort"),
        page=1 if page is None else page,
        per_page=_int_or_raw(params.get("per_page")),
        max_per_page=settings.PAGINATION_MAX_PER_PAGE,
    )
