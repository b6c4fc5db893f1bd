"""Permission repository for database operations."""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from roledesk.infrastructure.persistence.models import PermissionModel


class PermissionRepository:
    """Repository for permission database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def list_all(self) -> list[PermissionModel]:
        """List all permissions.

        Returns:
            List of all permission models ordered by ID.
        """
        result = await self.session.execute(
            select(PermissionModel).order_by(PermissionModel.id)
        )
        return list(result.scalars().all())

    async def get_by_ids(self, permission_ids: Iterable[int]) -> list[PermissionModel]:
        """Get permissions by ID.

        Unknown ids are skipped; callers compare lengths to detect them.

        Args:
            permission_ids: Permission IDs.

        Returns:
            Matching permission models ordered by ID.
        """
        ids = list(set(permission_ids))
        if not ids:
            return []
        result = await self.session.execute(
            select(PermissionModel)
            .where(PermissionModel.id.in_(ids))
            .order_by(PermissionModel.id)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count all permissions."""
        result = await self.session.execute(select(func.count(PermissionModel.id)))
        return result.scalar_one()

    async def bulk_create(self, permissions: list[PermissionModel]) -> list[PermissionModel]:
        """Insert several permissions at once.

        Args:
            permissions: Permission models to insert.

        Returns:
            The inserted models with IDs assigned.
        """
        self.session.add_all(permissions)
        await self.session.flush()
        return permissions
