"""API routers."""

from creator_program.routers.admin_creator_applications import (
    router as admin_creator_applications_router,
)
from creator_program.routers.admin_creators import router as admin_creators_router
from creator_program.routers.creator_applications import router as creator_applications_router
from creator_program.routers.creators import router as creators_router
from creator_program.routers.internal import router as internal_router

__all__ = [
    "admin_creator_applications_router",
    "admin_creators_router",
    "creator_applications_router",
    "creators_router",
    "internal_router",
]
