"""SQLAlchemy models for the RoleDesk tables.

All models inherit from the Base class defined in database.py.
"""

from roledesk.infrastructure.persistence.models.permission import PermissionModel
from roledesk.infrastructure.persistence.models.role import RoleModel
from roledesk.infrastructure.persistence.models.role_permission import role_permissions

__all__ = [
    "PermissionModel",
    "RoleModel",
    "role_permissions",
]
