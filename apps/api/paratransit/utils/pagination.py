"""Pagination and list-query utilities for list endpoints."""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from fastapi import Query
from sqlalchemy import asc, desc, or_
from sqlalchemy.orm import Query as SQLAlchemyQuery


T = TypeVar("T")

# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, description=f"Items per page (max {MAX_PER_PAGE})"),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(page=page, per_page=per_page)


@dataclass
class SortParams:
    """Search and sort parameters from query string."""
    search: str | None
    sort_by: str | None
    sort_dir: Literal["asc", "desc"]


def get_sort_params(
    search: str | None = Query(None, max_length=100, description="Case-insensitive text search"),
    sort_by: str | None = Query(None, max_length=50, description="Column to sort by"),
    sort_dir: Literal["asc", "desc"] = Query("asc", description="Sort direction"),
) -> SortParams:
    return SortParams(search=search.strip() if search else None, sort_by=sort_by, sort_dir=sort_dir)


@dataclass
class PaginatedResponse(Generic[T]):
    """Standard paginated response structure."""
    items: list[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def create(cls, items: list[T], total: int, pagination: PaginationParams) -> "PaginatedResponse[T]":
        pages = (total + pagination.per_page - 1) // pagination.per_page if pagination.per_page > 0 else 0
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            per_page=pagination.per_page,
            pages=pages,
        )


def apply_search(query: SQLAlchemyQuery, search: str | None, columns: list) -> SQLAlchemyQuery:
    """OR together case-insensitive substring matches over columns."""
    if not search:
        return query
    pattern = f"%{search}%"
    return query.filter(or_(*[column.ilike(pattern) for column in columns]))


def apply_sort(
    query: SQLAlchemyQuery,
    sort: SortParams,
    sortable: dict,
    default,
) -> SQLAlchemyQuery:
    """
    Order by a whitelisted column.

    Raises:
        ValueError: If sort_by is not in the whitelist
    """
    if sort.sort_by is None:
        return query.order_by(default)
    column = sortable.get(sort.sort_by)
    if column is None:
        raise ValueError(
            f"Cannot sort by '{sort.sort_by}'. Allowed: {', '.join(sorted(sortable))}"
        )
    direction = desc if sort.sort_dir == "desc" else asc
    return query.order_by(direction(column))


def paginate_query(query: SQLAlchemyQuery, pagination: PaginationParams) -> tuple[list, int]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        (items, total_count)
    """
    total = query.count()
    items = query.offset(pagination.offset).limit(pagination.per_page).all()
    return items, total
