"""API Routes for RoleDesk."""

from roledesk.infrastructure.api.routes.access_control_router import (
    router as access_control_router,
)

__all__ = [
    "access_control_router",
]
