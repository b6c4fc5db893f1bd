"""Exceptions raised by the permission editing core."""

from collections.abc import Iterable


class RoleDeskError(Exception):
    """Base class for all RoleDesk errors."""

    pass


class ValidationError(RoleDeskError):
    """Raised when role input fails a field-level check.

    Attributes:
        field: Field the error refers to ('name' or 'description').
        message: Human-readable message suitable for display next to the field.
        code: Machine-readable error code.
    """

    def __init__(self, field: str, message: str, code: str) -> None:
        self.field = field
        self.message = message
        self.code = code
        super().__init__(message)


class InvariantViolation(RoleDeskError):
    """Raised when an operation would break a state invariant.

    These are programmer errors: the offending mutation is rejected and
    the state is left exactly as it was.
    """

    pass


class UnknownPermission(InvariantViolation):
    """Raised when permission ids are not part of the catalog."""

    def __init__(self, permission_ids: Iterable[int]) -> None:
        self.permission_ids = frozenset(permission_ids)
        ids = ", ".join(str(i) for i in sorted(self.permission_ids))
        super().__init__(f"Unknown permission id(s): {ids}")


class InvalidGuardTransition(InvariantViolation):
    """Raised when a role switch action is not valid in the current guard state."""

    pass


class AlreadySaving(RoleDeskError):
    """Raised when a save is requested while another save for the role is in flight."""

    def __init__(self, role_id: int) -> None:
        self.role_id = role_id
        super().__init__(f"A save for role {role_id} is already in progress")


class CatalogUnavailable(RoleDeskError):
    """Raised when the permission catalog cannot be loaded.

    Recoverable: callers should surface it and offer a retry.
    """

    pass


class RoleNotFound(RoleDeskError):
    """Raised when a role id does not match any known role."""

    def __init__(self, role_id: int) -> None:
        self.role_id = role_id
        super().__init__(f"Role with ID {role_id} not found")


class UnknownTemplate(RoleDeskError):
    """Raised when a role template id is not registered."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Role template '{template_id}' not found")
