"""Persistence boundary consumed by the permission editing core.

The core never talks to a database or transport directly; it works against
this abstract store and only ever holds copies of the records it returns.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from roledesk.domain.entities import Permission, Role


class RoleStore(ABC):
    """Abstract base class for role/permission stores."""

    @abstractmethod
    async def list_roles(self) -> list[Role]:
        """List all persisted roles with their permission ids."""
        ...

    @abstractmethod
    async def list_permissions(self) -> list[Permission]:
        """List the permission catalog in display order.

        May return an empty list when the catalog has not been seeded.
        """
        ...

    @abstractmethod
    async def seed_permissions(self) -> int:
        """Seed the default permission catalog if it is empty.

        Returns:
            Number of permissions inserted (0 if the catalog was not empty).
        """
        ...

    @abstractmethod
    async def create_role(
        self, name: str, description: str, permission_ids: Iterable[int]
    ) -> Role:
        """Persist a new role granting ``permission_ids``."""
        ...

    @abstractmethod
    async def replace_role_permissions(
        self, role_id: int, permission_ids: Iterable[int]
    ) -> Role:
        """Replace the entire permission set of a role."""
        ...

    @abstractmethod
    async def update_role(self, role_id: int, name: str, description: str) -> Role:
        """Rename a role and update its description."""
        ...

    @abstractmethod
    async def delete_role(self, role_id: int) -> None:
        """Delete a role and its permission grants."""
        ...
