"""Pagination utilities for list endpoints."""

from dataclasses import dataclass
from typing import Callable

from fastapi import Query
from sqlalchemy.orm import Query as SQLAlchemyQuery


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
ADMIN_MAX_LIMIT = 100
PUBLIC_MAX_LIMIT = 50


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination_dependency(max_limit: int) -> Callable[..., PaginationParams]:
    """
    Build a pagination dependency capped at ``max_limit`` items per page.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(pagination_dependency(100))):
            ...
    """

    def dependency(
        page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
        limit: int = Query(
            DEFAULT_LIMIT, ge=1, le=max_limit, description=f"Items per page (max {max_limit})"
        ),
    ) -> PaginationParams:
        return PaginationParams(page=page, limit=limit)

    return dependency


get_admin_pagination = pagination_dependency(ADMIN_MAX_LIMIT)
get_public_pagination = pagination_dependency(PUBLIC_MAX_LIMIT)


def paginate_query(query: SQLAlchemyQuery, pagination: PaginationParams) -> tuple[list, int]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        (items, total_count)
    """
    total = query.order_by(None).count()
    items = query.offset(pagination.offset).limit(pagination.limit).all()
    return items, total


def build_page_meta(total: int, pagination: PaginationParams) -> dict:
    total_pages = (total + pagination.limit - 1) // pagination.limit if pagination.limit > 0 else 0
    return {
        "current_page": pagination.page,
        "total_pages": total_pages,
        "total_items": total,
        "limit": pagination.limit,
        "has_next_page": pagination.page < total_pages,
        "has_prev_page": pagination.page > 1,
    }
