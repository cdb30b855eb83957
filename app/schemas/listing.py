from typing import Any, Optional

from pydantic import BaseModel, Field

from app.core.config import settings
from app.services.listing import ListingRequest

class ListQuery(BaseModel):
    # Filters and paging stay untyped here; the listing validation reports them.
    filters: Any = Field(default_factory=dict)
    sort: Optional[str] = None
    page: Any = 1
    per_page: Any = Field(default_factory=lambda: settings.PAGINATION_DEFAULT_PER_PAGE)

    def to_listing(self) -> ListingRequest:
        return ListingRequest(
            filters=self.filters,
            sort=self.sort,
            page=self.page,
            per_page=self.per_page,
            max_per_page=settings.PAGINATION_MAX_PER_PAGE,
        )
