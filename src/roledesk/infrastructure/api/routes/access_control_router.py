"""Access-control API routes.

Provides endpoints for managing roles, their permission sets, the
permission catalog and role templates. Domain errors raised here are
translated to HTTP responses by the handlers registered in ``app.py``.
"""

from fastapi import APIRouter, Query, Response, status

from roledesk.core.logging import get_logger
from roledesk.domain.entities import Permission
from roledesk.domain.services import ALL_CATEGORIES, RoleDraft
from roledesk.infrastructure.api.dependencies import (
    CatalogDep,
    RegistryDep,
    RoleStoreDep,
    TemplateEngineDep,
)
from roledesk.infrastructure.api.schemas import (
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

logger = get_logger(__name__)

router = APIRouter()


def _grouped_response(
    grouped: dict[str, list[Permission]] | dict[str, tuple[Permission, ...]],
) -> dict[str, list[PermissionResponse]]:
    return {
        category: [PermissionResponse.from_entity(p) for p in perms]
        for category, perms in grouped.items()
    }


# -- roles -------------------------------------------------------------------


@router.get(
    "/roles",
    status_code=status.HTTP_200_OK,
    response_model=RoleListResponse,
)
async def list_roles(registry: RegistryDep) -> RoleListResponse:
    """List all roles with their permission IDs."""
    items = [RoleResponse.from_entity(role) for role in registry.roles]
    logger.debug("Roles listed", count=len(items))
    return RoleListResponse(items=items, total=len(items))


@router.get(
    "/roles/{role_id}",
    status_code=status.HTTP_200_OK,
    response_model=RoleResponse,
    responses={404: {"description": "Role not found"}},
)
async def get_role(role_id: int, registry: RegistryDep) -> RoleResponse:
    """Get a role by ID."""
    return RoleResponse.from_entity(registry.get(role_id))


@router.post(
    "/roles",
    status_code=status.HTTP_201_CREATED,
    response_model=RoleResponse,
    responses={
        400: {"description": "Validation error or unknown permission"},
        404: {"description": "Role template not found"},
        409: {"description": "Role name already exists"},
    },
)
async def create_role(
    role_request: CreateRoleRequest,
    registry: RegistryDep,
    catalog: CatalogDep,
    templates: TemplateEngineDep,
) -> RoleResponse:
    """Create a new role.

    When ``template_id`` is given, the template supplies the name and
    description unless they are provided, and the permission set unless
    ``permission_ids`` is provided.

    Args:
        role_request: Role creation request.
        registry: Role registry with roles loaded.
        catalog: Loaded permission catalog.
        templates: Role template engine.

    Returns:
        Created role.
    """
    draft = RoleDraft()
    if role_request.template_id:
        template = templates.get(role_request.template_id)
        draft.apply_template(template, templates.resolve(template, catalog.all))
    if role_request.name:
        draft.set_name(role_request.name)
    if role_request.description:
        draft.set_description(role_request.description)

    if role_request.permission_ids is not None:
        permission_ids = frozenset(role_request.permission_ids)
    else:
        permission_ids = draft.permission_ids or frozenset()

    role = await registry.create_role(draft.name, draft.description, permission_ids)

    logger.info(
        "Role created successfully",
        role_id=role.id,
        role_name=role.name,
        template_id=draft.template.id if draft.template else None,
    )
    return RoleResponse.from_entity(role)


@router.put(
    "/roles/{role_id}",
    status_code=status.HTTP_200_OK,
    response_model=RoleResponse,
    responses={
        400: {"description": "Validation error"},
        404: {"description": "Role not found"},
        409: {"description": "Role name already exists"},
    },
)
async def update_role(
    role_id: int,
    role_request: UpdateRoleRequest,
    registry: RegistryDep,
) -> RoleResponse:
    """Rename a role and update its description."""
    role = await registry.rename_role(role_id, role_request.name, role_request.description)
    return RoleResponse.from_entity(role)


@router.put(
    "/roles/{role_id}/permissions",
    status_code=status.HTTP_200_OK,
    response_model=RoleResponse,
    responses={
        400: {"description": "Unknown permission"},
        404: {"description": "Role not found"},
        409: {"description": "Save already in progress"},
    },
)
async def update_role_permissions(
    role_id: int,
    permissions_request: UpdateRolePermissionsRequest,
    registry: RegistryDep,
) -> RoleResponse:
    """Replace the entire permission set of a role."""
    role = await registry.update_permissions(role_id, permissions_request.permission_ids)
    return RoleResponse.from_entity(role)


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Role not found"}},
)
async def delete_role(role_id: int, registry: RegistryDep) -> Response:
    """Delete a role and its permission grants."""
    await registry.delete_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- permissions -------------------------------------------------------------


@router.get(
    "/permissions",
    status_code=status.HTTP_200_OK,
    response_model=PermissionCatalogResponse,
    responses={503: {"description": "Permission catalog unavailable"}},
)
async def list_permissions(
    catalog: CatalogDep,
    search: str = Query(default="", description="Filter by name or description"),
    category: str = Query(default=ALL_CATEGORIES, description="Category name or 'all'"),
) -> PermissionCatalogResponse:
    """Get the permission catalog.

    ``all`` always holds the full catalog; ``grouped`` holds the permissions
    matching the search and category filters.
    """
    grouped = catalog.filtered(search, category)
    return PermissionCatalogResponse(
        all=[PermissionResponse.from_entity(p) for p in catalog.all],
        grouped=_grouped_response(grouped),
        categories=catalog.categories,
    )


@router.post(
    "/permissions/seed",
    status_code=status.HTTP_200_OK,
    response_model=SeedResponse,
)
async def seed_permissions(store: RoleStoreDep) -> SeedResponse:
    """Seed the default permission catalog if it is empty."""
    seeded = await store.seed_permissions()
    total = len(await store.list_permissions())
    message = (
        f"Seeded {seeded} permissions" if seeded else "Permissions already seeded"
    )
    logger.info("Permission seed requested", seeded=seeded, total=total)
    return SeedResponse(seeded=seeded, total=total, message=message)


# -- role templates ----------------------------------------------------------


@router.get(
    "/role-templates",
    status_code=status.HTTP_200_OK,
    response_model=list[RoleTemplateResponse],
)
async def list_role_templates(
    catalog: CatalogDep,
    templates: TemplateEngineDep,
) -> list[RoleTemplateResponse]:
    """List role templates with their resolved permission counts."""
    return [
        RoleTemplateResponse.from_entity(
            template, len(templates.resolve(template, catalog.all))
        )
        for template in templates.list_templates()
    ]


@router.get(
    "/role-templates/{template_id}/preview",
    status_code=status.HTTP_200_OK,
    response_model=TemplatePreviewResponse,
    responses={404: {"description": "Role template not found"}},
)
async def preview_role_template(
    template_id: str,
    catalog: CatalogDep,
    templates: TemplateEngineDep,
) -> TemplatePreviewResponse:
    """Preview the permissions a template resolves to."""
    template = templates.get(template_id)
    ids = templates.resolve(template, catalog.all)
    return TemplatePreviewResponse(
        template=RoleTemplateResponse.from_entity(template, len(ids)),
        permission_ids=sorted(ids),
        grouped=_grouped_response(templates.preview(template, catalog.all)),
    )


@router.get("/health", tags=["health"])
async def access_control_health(catalog: CatalogDep) -> dict:
    """Report whether the permission catalog can be loaded."""
    return {
        "status": "healthy",
        "permissions": len(catalog.all),
        "categories": len(catalog.categories),
    }
