"""FastAPI dependencies wiring the domain services to a database session.

Each request gets its own store, catalog and registry. The template engine
and the set of roles with a save in flight are shared per process.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from roledesk.domain.services import PermissionCatalog, RoleRegistry, RoleTemplateEngine
from roledesk.infrastructure.persistence.database import get_db_session
from roledesk.infrastructure.persistence.sql_role_store import SqlRoleStore


async def get_role_store(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> SqlRoleStore:
    """Get a role store bound to the request's session."""
    return SqlRoleStore(session)


async def get_permission_catalog(
    store: Annotated[SqlRoleStore, Depends(get_role_store)],
) -> PermissionCatalog:
    """Get a loaded permission catalog.

    Raises:
        CatalogUnavailable: If the catalog cannot be loaded (mapped to 503).
    """
    catalog = PermissionCatalog(store)
    await catalog.load()
    return catalog


@lru_cache
def get_save_tracker() -> set[int]:
    """Get the process-wide set of role ids with a save in flight."""
    return set()


async def get_role_registry(
    store: Annotated[SqlRoleStore, Depends(get_role_store)],
    catalog: Annotated[PermissionCatalog, Depends(get_permission_catalog)],
    saving: Annotated[set[int], Depends(get_save_tracker)],
) -> RoleRegistry:
    """Get a role registry with roles loaded."""
    registry = RoleRegistry(store, catalog, saving)
    await registry.refresh()
    return registry


@lru_cache
def get_template_engine() -> RoleTemplateEngine:
    """Get the shared role template engine."""
    return RoleTemplateEngine()


RoleStoreDep = Annotated[SqlRoleStore, Depends(get_role_store)]
CatalogDep = Annotated[PermissionCatalog, Depends(get_permission_catalog)]
RegistryDep = Annotated[RoleRegistry, Depends(get_role_registry)]
TemplateEngineDep = Annotated[RoleTemplateEngine, Depends(get_template_engine)]
