"""Access-control API schemas for request/response validation."""

from pydantic import BaseModel, Field, field_validator

from roledesk.domain.entities import Permission, Role, RoleTemplate


class CreateRoleRequest(BaseModel):
    """Request schema for creating a role.

    Attributes:
        name: Role name (e.g., 'Doctor').
        description: Optional description of the role's purpose.
        permission_ids: Permissions to grant. When omitted and a template is
            given, the template's resolved permissions are used.
        template_id: Optional role template to derive permissions from.
    """

    name: str = ""
    description: str = ""
    permission_ids: list[int] | None = None
    template_id: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v: str | None) -> str:
        return v or ""


class UpdateRoleRequest(BaseModel):
    """Request schema for renaming a role.

    Attributes:
        name: New role name.
        description: New description.
    """

    name: str
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v: str | None) -> str:
        return v or ""


class UpdateRolePermissionsRequest(BaseModel):
    """Request schema for replacing a role's permission set.

    Attributes:
        permission_ids: The complete set of permissions the role grants.
    """

    permission_ids: list[int] = Field(default_factory=list)


class PermissionResponse(BaseModel):
    """Response schema for a permission."""

    id: int
    name: str
    category: str
    description: str = ""

    @classmethod
    def from_entity(cls, permission: Permission) -> "PermissionResponse":
        return cls(
            id=permission.id,
            name=permission.name,
            category=permission.category,
            description=permission.description,
        )


class PermissionCatalogResponse(BaseModel):
    """Response schema for the permission catalog.

    Attributes:
        all: Every permission in display order.
        grouped: Matching permissions by category.
        categories: Category names in display order.
    """

    all: list[PermissionResponse]
    grouped: dict[str, list[PermissionResponse]]
    categories: list[str]


class RoleResponse(BaseModel):
    """Response schema for a role.

    Attributes:
        id: Role ID.
        name: Role name.
        description: Role description.
        permission_ids: Granted permission IDs, ascending.
        permissions_count: Number of granted permissions.
    """

    id: int
    name: str
    description: str = ""
    permission_ids: list[int]
    permissions_count: int

    @classmethod
    def from_entity(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permission_ids=sorted(role.permission_ids),
            permissions_count=len(role.permission_ids),
        )


class RoleListResponse(BaseModel):
    """Response schema for listing roles."""

    items: list[RoleResponse]
    total: int


class RoleTemplateResponse(BaseModel):
    """Response schema for a role template.

    Attributes:
        permissions_count: Permissions the template resolves to against the
            current catalog.
    """

    id: str
    name: str
    description: str
    icon: str
    permissions_count: int

    @classmethod
    def from_entity(cls, template: RoleTemplate, permissions_count: int) -> "RoleTemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            description=template.description,
            icon=template.icon.value,
            permissions_count=permissions_count,
        )


class TemplatePreviewResponse(BaseModel):
    """Response schema for a template preview.

    Attributes:
        template: The template.
        permission_ids: Resolved permission IDs, ascending.
        grouped: Resolved permissions by category.
    """

    template: RoleTemplateResponse
    permission_ids: list[int]
    grouped: dict[str, list[PermissionResponse]]


class SeedResponse(BaseModel):
    """Response schema for seeding the permission catalog."""

    seeded: int
    total: int
    message: str
