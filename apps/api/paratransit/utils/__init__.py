"""Utility modules."""

from paratransit.utils.normalization import (
    normalize_email,
    normalize_name,
    normalize_phone,
    normalize_search_text,
)
from paratransit.utils.pagination import (
    PaginatedResponse,
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
    paginate_query,
)

__all__ = [
    # Normalization
    "normalize_email",
    "normalize_name",
    "normalize_phone",
    "normalize_search_text",
    # Pagination
    "PaginationParams",
    "PaginatedResponse",
    "SortParams",
    "get_pagination",
    "get_sort_params",
    "paginate_query",
]
