"""API request/response schemas."""

from roledesk.infrastructure.api.schemas.access_control_schemas import (
    CreateRoleRequest,
    PermissionCatalogResponse,
    PermissionResponse,
    RoleListResponse,
    RoleResponse,
    RoleTemplateResponse,
    SeedResponse,
    TemplatePreviewResponse,
    UpdateRolePermissionsRequest,
    UpdateRoleRequest,
)

__all__ = [
    "CreateRoleRequest",
    "PermissionCatalogResponse",
    "PermissionResponse",
    "RoleListResponse",
    "RoleResponse",
    "RoleTemplateResponse",
    "SeedResponse",
    "TemplatePreviewResponse",
    "UpdateRolePermissionsRequest",
    "UpdateRoleRequest",
]
