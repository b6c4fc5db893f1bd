"""Domain services for RoleDesk.

Services contain the permission editing logic. They depend only on the
abstract :class:`RoleStore`, never on a concrete database or transport.
"""

from roledesk.domain.services.permission_catalog import (
    ALL_CATEGORIES,
    PermissionCatalog,
    group_permissions,
    infer_category,
)
from roledesk.domain.services.permission_editor import PermissionEditor
from roledesk.domain.services.role_registry import RoleRegistry
from roledesk.domain.services.role_store import RoleStore
from roledesk.domain.services.role_switch_guard import (
    GuardStatus,
    RoleSwitchGuard,
    SwitchResult,
)
from roledesk.domain.services.role_template_engine import RoleDraft, RoleTemplateEngine
from roledesk.domain.services.selection_state import (
    CategorySelection,
    CategoryStatus,
    SelectionState,
    SelectionSummary,
)

__all__ = [
    "ALL_CATEGORIES",
    "CategorySelection",
    "CategoryStatus",
    "GuardStatus",
    "PermissionCatalog",
    "PermissionEditor",
    "RoleDraft",
    "RoleRegistry",
    "RoleStore",
    "RoleSwitchGuard",
    "RoleTemplateEngine",
    "SelectionState",
    "SelectionSummary",
    "SwitchResult",
    "group_permissions",
    "infer_category",
]
