"""Role entity for authorization.

A role is a named collection of permissions assignable to users.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Role:
    """Role entity.

    Attributes:
        id: Unique identifier, None for roles not yet created.
        name: Role name, unique case-insensitively.
        description: Optional description of the role's purpose.
        permission_ids: Ids of the permissions granted by the role.
    """

    id: int | None
    name: str
    description: str = ""
    permission_ids: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        """Validate role data after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Role name is required")
        if not isinstance(self.permission_ids, frozenset):
            object.__setattr__(self, "permission_ids", frozenset(self.permission_ids))

    def with_permissions(self, permission_ids: Iterable[int]) -> "Role":
        """Return a copy of the role granting exactly ``permission_ids``."""
        return replace(self, permission_ids=frozenset(permission_ids))
