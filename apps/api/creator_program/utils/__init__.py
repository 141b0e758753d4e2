"""Utility modules."""

from creator_program.utils.pagination import (
    PaginationParams,
    build_page_meta,
    get_admin_pagination,
    get_public_pagination,
    paginate_query,
)

__all__ = [
    "PaginationParams",
    "build_page_meta",
    "get_admin_pagination",
    "get_public_pagination",
    "paginate_query",
]
