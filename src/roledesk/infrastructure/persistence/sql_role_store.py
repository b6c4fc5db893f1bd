"""SQLAlchemy implementation of the role store."""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from roledesk.core.config import get_settings
from roledesk.core.logging import get_logger
from roledesk.domain.entities import Permission, Role
from roledesk.domain.exceptions import RoleNotFound, UnknownPermission, ValidationError
from roledesk.domain.services import RoleStore, infer_category
from roledesk.infrastructure.persistence.models import PermissionModel, RoleModel
from roledesk.infrastructure.persistence.repositories import (
    PermissionRepository,
    RoleRepository,
)
from roledesk.infrastructure.persistence.seed import DEFAULT_PERMISSIONS, category_rank

logger = get_logger(__name__)


def to_permission(model: PermissionModel) -> Permission:
    """Convert a permission row to a domain entity."""
    return Permission(
        id=model.id,
        name=model.name,
        category=model.category or infer_category(model.name),
        description=model.description or "",
    )


def to_role(model: RoleModel) -> Role:
    """Convert a role row (with permissions loaded) to a domain entity."""
    return Role(
        id=model.id,
        name=model.name,
        description=model.description or "",
        permission_ids=frozenset(p.id for p in model.permissions),
    )


class SqlRoleStore(RoleStore):
    """Role store backed by the roles/permissions tables.

    Every mutating call commits its own transaction.
    """

    def __init__(self, session: AsyncSession, auto_seed: bool | None = None) -> None:
        """Initialize the store.

        Args:
            session: SQLAlchemy async session.
            auto_seed: Seed the default catalog on first read when empty.
                Defaults to the ``auto_seed_permissions`` setting.
        """
        self.session = session
        self.roles = RoleRepository(session)
        self.permissions = PermissionRepository(session)
        self.auto_seed = get_settings().auto_seed_permissions if auto_seed is None else auto_seed

    async def list_roles(self) -> list[Role]:
        return [to_role(model) for model in await self.roles.list_all()]

    async def get_role(self, role_id: int) -> Role:
        """Get a single role.

        Raises:
            RoleNotFound: If the role does not exist.
        """
        return to_role(await self._get_role_model(role_id))

    async def list_permissions(self) -> list[Permission]:
        """List permissions sorted by category order, then name."""
        models = await self.permissions.list_all()
        if not models and self.auto_seed:
            logger.info("No permissions found, seeding defaults")
            await self.seed_permissions()
            models = await self.permissions.list_all()

        permissions = [to_permission(model) for model in models]
        permissions.sort(key=lambda p: (category_rank(p.category), p.name))
        return permissions

    async def seed_permissions(self) -> int:
        if await self.permissions.count() > 0:
            logger.debug("Permissions already seeded")
            return 0

        await self.permissions.bulk_create(
            [
                PermissionModel(name=name, description=description, category=category)
                for name, description, category in DEFAULT_PERMISSIONS
            ]
        )
        await self.session.commit()
        logger.info("Default permissions seeded", count=len(DEFAULT_PERMISSIONS))
        return len(DEFAULT_PERMISSIONS)

    async def create_role(
        self, name: str, description: str, permission_ids: Iterable[int]
    ) -> Role:
        """Create a role.

        Raises:
            ValidationError: If a role with the same name (ignoring case) exists.
            UnknownPermission: If a permission id does not exist.
        """
        if await self.roles.get_by_name(name) is not None:
            raise ValidationError(
                "name", f'A role with the name "{name}" already exists', "duplicate_name"
            )

        permissions = await self._get_permission_models(permission_ids)
        role = await self.roles.create(
            RoleModel(name=name, description=description, permissions=permissions)
        )
        await self.session.commit()

        logger.info("Role stored", role_id=role.id, permissions=len(permissions))
        return to_role(role)

    async def replace_role_permissions(
        self, role_id: int, permission_ids: Iterable[int]
    ) -> Role:
        """Replace a role's permission set.

        Raises:
            RoleNotFound: If the role does not exist.
            UnknownPermission: If a permission id does not exist.
        """
        role = await self._get_role_model(role_id)
        role.permissions = await self._get_permission_models(permission_ids)
        await self.session.commit()

        logger.info("Role permissions stored", role_id=role_id, permissions=len(role.permissions))
        return to_role(role)

    async def update_role(self, role_id: int, name: str, description: str) -> Role:
        """Rename a role.

        Raises:
            RoleNotFound: If the role does not exist.
            ValidationError: If another role already uses the name.
        """
        role = await self._get_role_model(role_id)
        existing = await self.roles.get_by_name(name)
        if existing is not None and existing.id != role_id:
            raise ValidationError(
                "name", f'A role with the name "{name}" already exists', "duplicate_name"
            )

        await self.roles.update(role, name, description)
        await self.session.commit()
        return to_role(role)

    async def delete_role(self, role_id: int) -> None:
        role = await self._get_role_model(role_id)
        await self.roles.delete(role)
        await self.session.commit()
        logger.info("Role removed", role_id=role_id)

    async def _get_role_model(self, role_id: int) -> RoleModel:
        role = await self.roles.get_by_id(role_id)
        if role is None:
            raise RoleNotFound(role_id)
        return role

    async def _get_permission_models(self, permission_ids: Iterable[int]) -> list[PermissionModel]:
        ids = frozenset(permission_ids)
        models = await self.permissions.get_by_ids(ids)
        unknown = ids - {model.id for model in models}
        if unknown:
            raise UnknownPermission(unknown)
        return models
