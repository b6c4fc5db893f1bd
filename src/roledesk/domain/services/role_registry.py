"""Role registry service.

Provides role creation, rename validation and permission persistence on
top of a :class:`RoleStore`, keeping an in-memory copy of the roles so that
name uniqueness can be checked before anything is sent to the store.
"""

from collections.abc import Iterable

from roledesk.core.logging import get_logger
from roledesk.domain.entities import Role
from roledesk.domain.exceptions import (
    AlreadySaving,
    RoleNotFound,
    UnknownPermission,
    ValidationError,
)
from roledesk.domain.services.permission_catalog import PermissionCatalog
from roledesk.domain.services.role_store import RoleStore

logger = get_logger(__name__)


class RoleRegistry:
    """CRUD-level operations over roles.

    At most one permission save per role may be in flight; a second request
    for the same role is rejected with :class:`AlreadySaving` rather than
    queued.
    """

    MAX_NAME_LENGTH = 100
    MAX_DESCRIPTION_LENGTH = 255

    def __init__(
        self,
        store: RoleStore,
        catalog: PermissionCatalog | None = None,
        saving: set[int] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            store: Persistence boundary.
            catalog: Loaded catalog used to reject unknown permission ids.
                Without one, ids are passed to the store unchecked.
            saving: Ids of roles with a save in flight. Registries that
                share this set refuse overlapping saves for the same role.
        """
        self.store = store
        self.catalog = catalog
        self._roles: dict[int, Role] = {}
        self._saving: set[int] = saving if saving is not None else set()

    @property
    def roles(self) -> list[Role]:
        return list(self._roles.values())

    async def refresh(self) -> list[Role]:
        """Reload roles from the store."""
        roles = await self.store.list_roles()
        self._roles = {role.id: role for role in roles if role.id is not None}
        logger.debug("Roles loaded", count=len(self._roles))
        return self.roles

    def get(self, role_id: int) -> Role:
        """Get a role by id.

        Raises:
            RoleNotFound: If the role is unknown.
        """
        role = self._roles.get(role_id)
        if role is None:
            raise RoleNotFound(role_id)
        return role

    def is_saving(self, role_id: int) -> bool:
        return role_id in self._saving

    def validate(
        self, name: str, description: str = "", exclude_role_id: int | None = None
    ) -> tuple[str, str]:
        """Validate a role name and description.

        Checks run in order: name required, duplicate name, name length,
        description length. The first failure is raised.

        Args:
            name: Proposed role name.
            description: Proposed description.
            exclude_role_id: Role to ignore in the duplicate check (rename).

        Returns:
            The trimmed (name, description).

        Raises:
            ValidationError: On the first failing check.
        """
        trimmed_name = (name or "").strip()
        trimmed_description = (description or "").strip()

        if not trimmed_name:
            raise ValidationError("name", "Role name is required", "name_required")

        folded = trimmed_name.casefold()
        for role in self._roles.values():
            if role.id != exclude_role_id and role.name.strip().casefold() == folded:
                raise ValidationError(
                    "name",
                    f'A role with the name "{trimmed_name}" already exists',
                    "duplicate_name",
                )

        if len(trimmed_name) > self.MAX_NAME_LENGTH:
            raise ValidationError(
                "name",
                f"Role name must be at most {self.MAX_NAME_LENGTH} characters",
                "name_too_long",
            )

        if len(trimmed_description) > self.MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                "description",
                f"Description must be at most {self.MAX_DESCRIPTION_LENGTH} characters",
                "description_too_long",
            )

        return trimmed_name, trimmed_description

    def validate_rename(self, role_id: int, name: str, description: str = "") -> tuple[str, str]:
        """Validate a rename of an existing role.

        Raises:
            RoleNotFound: If the role is unknown.
            ValidationError: On the first failing check.
        """
        self.get(role_id)
        return self.validate(name, description, exclude_role_id=role_id)

    async def create_role(
        self, name: str, description: str, permission_ids: Iterable[int]
    ) -> Role:
        """Create a role.

        Args:
            name: Role name (trimmed before use).
            description: Role description.
            permission_ids: Permissions the new role grants.

        Returns:
            The persisted role.

        Raises:
            ValidationError: If name or description are invalid.
            UnknownPermission: If an id is not in the catalog.
        """
        clean_name, clean_description = self.validate(name, description)
        ids = frozenset(permission_ids)
        self._check_known(ids)

        role = await self.store.create_role(clean_name, clean_description, ids)
        self._roles[role.id] = role

        logger.info(
            "Role created",
            role_id=role.id,
            role_name=role.name,
            permissions=len(role.permission_ids),
        )
        return role

    async def update_permissions(self, role_id: int, permission_ids: Iterable[int]) -> Role:
        """Replace a role's entire permission set.

        The caller must commit the returned role's ids into its selection
        so the selection becomes clean again.

        Raises:
            RoleNotFound: If the role is unknown.
            UnknownPermission: If an id is not in the catalog.
            AlreadySaving: If a save for this role is already in flight.
        """
        self.get(role_id)
        ids = frozenset(permission_ids)
        self._check_known(ids)

        if role_id in self._saving:
            logger.info("Save rejected: already saving", role_id=role_id)
            raise AlreadySaving(role_id)

        self._saving.add(role_id)
        try:
            role = await self.store.replace_role_permissions(role_id, ids)
        except Exception as e:
            logger.error("Failed to save role permissions", role_id=role_id, error=str(e))
            raise
        finally:
            self._saving.discard(role_id)

        self._roles[role.id] = role
        logger.info("Role permissions updated", role_id=role_id, permissions=len(ids))
        return role

    async def rename_role(self, role_id: int, name: str, description: str = "") -> Role:
        """Rename a role after validating the new name."""
        clean_name, clean_description = self.validate_rename(role_id, name, description)
        role = await self.store.update_role(role_id, clean_name, clean_description)
        self._roles[role.id] = role
        logger.info("Role renamed", role_id=role_id, role_name=clean_name)
        return role

    async def delete_role(self, role_id: int) -> None:
        """Delete a role.

        Raises:
            RoleNotFound: If the role is unknown.
            AlreadySaving: If a save for this role is in flight.
        """
        self.get(role_id)
        if role_id in self._saving:
            raise AlreadySaving(role_id)
        await self.store.delete_role(role_id)
        self._roles.pop(role_id, None)
        logger.info("Role deleted", role_id=role_id)

    def _check_known(self, ids: frozenset[int]) -> None:
        if self.catalog is None or not self.catalog.is_loaded:
            return
        unknown = ids - self.catalog.ids
        if unknown:
            raise UnknownPermission(unknown)
