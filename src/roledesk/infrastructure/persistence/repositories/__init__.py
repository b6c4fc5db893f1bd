"""Persistence repositories for database operations."""

from roledesk.infrastructure.persistence.repositories.permission_repository import (
    PermissionRepository,
)
from roledesk.infrastructure.persistence.repositories.role_repository import (
    RoleRepository,
)

__all__ = [
    "PermissionRepository",
    "RoleRepository",
]
