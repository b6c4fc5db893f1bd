"""Role repository for database operations."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roledesk.infrastructure.persistence.models import RoleModel


class RoleRepository:
    """Repository for role database operations.

    Roles are always loaded together with their permissions so that the
    collection can be read or replaced without lazy loading.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, role: RoleModel) -> RoleModel:
        """Create a new role.

        Args:
            role: Role model to create.

        Returns:
            Created role model.
        """
        self.session.add(role)
        await self.session.flush()
        return role

    async def get_by_id(self, role_id: int) -> RoleModel | None:
        """Get a role by ID.

        Args:
            role_id: Role ID.

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel)
            .options(selectinload(RoleModel.permissions))
            .where(RoleModel.id == role_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> RoleModel | None:
        """Get a role by name, ignoring case.

        Args:
            name: Role name.

        Returns:
            Role model if found, None otherwise.
        """
        result = await self.session.execute(
            select(RoleModel).where(func.lower(RoleModel.name) == name.strip().lower())
        )
        return result.scalars().first()

    async def list_all(self) -> list[RoleModel]:
        """List all roles ordered by name.

        Returns:
            List of role models with permissions loaded.
        """
        result = await self.session.execute(
            select(RoleModel)
            .options(selectinload(RoleModel.permissions))
            .order_by(RoleModel.name)
        )
        return list(result.scalars().all())

    async def update(self, role: RoleModel, name: str, description: str) -> RoleModel:
        """Update a role's name and description.

        Args:
            role: Role model to update.
            name: New name.
            description: New description.

        Returns:
            Updated role model.
        """
        role.name = name
        role.description = description
        await self.session.flush()
        return role

    async def delete(self, role: RoleModel) -> None:
        """Delete a role.

        Args:
            role: Role model to delete.
        """
        await self.session.delete(role)
        await self.session.flush()
