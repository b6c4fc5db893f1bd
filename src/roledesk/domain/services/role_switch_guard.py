"""Guarded switching between roles.

The guard owns the active :class:`SelectionState`. Switching to another
role while the selection has unsaved edits does not happen straight away:
the guard enters ``PENDING_CONFIRM`` and waits for an explicit choice to
save and switch, discard and switch, or cancel. Nothing is ever discarded
or saved implicitly.

    IDLE --request_switch (dirty)--> PENDING_CONFIRM
    PENDING_CONFIRM --discard / save_then_switch (ok)--> IDLE (target loaded)
    PENDING_CONFIRM --save_then_switch (error)--> PENDING_CONFIRM
    PENDING_CONFIRM --cancel--> IDLE (original role, edits intact)
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from roledesk.core.logging import get_logger
from roledesk.domain.exceptions import AlreadySaving, InvalidGuardTransition
from roledesk.domain.services.selection_state import SelectionState

logger = get_logger(__name__)

LoadRoleFn = Callable[[int], SelectionState]
PersistFn = Callable[[int, frozenset[int]], Awaitable[Any]]


class GuardStatus(str, Enum):
    """States of the role switch guard."""

    IDLE = "idle"
    PENDING_CONFIRM = "pending_confirm"


class SwitchResult(str, Enum):
    """Outcome of a switch request."""

    SWITCHED = "switched"
    UNCHANGED = "unchanged"
    PENDING_CONFIRM = "pending_confirm"


class RoleSwitchGuard:
    """State machine arbitrating role switches over unsaved edits."""

    def __init__(self, load_role: LoadRoleFn) -> None:
        """Initialize the guard.

        Args:
            load_role: Builds a clean selection for a role id. Must not
                perform I/O; role data is expected to be loaded already.
        """
        self._load_role = load_role
        self.selection: SelectionState | None = None
        self.status = GuardStatus.IDLE
        self.pending_role_id: int | None = None
        self._saving = False

    @property
    def current_role_id(self) -> int | None:
        return self.selection.role_id if self.selection is not None else None

    @property
    def dirty(self) -> bool:
        return self.selection is not None and self.selection.dirty

    @property
    def is_saving(self) -> bool:
        return self._saving

    def request_switch(self, target_role_id: int) -> SwitchResult:
        """Ask to edit another role.

        Returns:
            UNCHANGED if the role is already active, SWITCHED if the target
            was loaded, PENDING_CONFIRM if unsaved edits need a decision.

        Raises:
            InvalidGuardTransition: If a previous switch is still pending.
        """
        if self.status is GuardStatus.PENDING_CONFIRM:
            raise InvalidGuardTransition(
                f"Switch to role {self.pending_role_id} is awaiting confirmation"
            )

        if self.current_role_id == target_role_id:
            return SwitchResult.UNCHANGED

        if not self.dirty:
            self._switch_to(target_role_id)
            return SwitchResult.SWITCHED

        self.status = GuardStatus.PENDING_CONFIRM
        self.pending_role_id = target_role_id
        logger.info(
            "Role switch pending confirmation",
            current_role_id=self.current_role_id,
            target_role_id=target_role_id,
        )
        return SwitchResult.PENDING_CONFIRM

    def discard(self) -> SelectionState:
        """Drop unsaved edits and perform the pending switch."""
        target = self._require_pending("discard")
        dropped = len(self.selection.added) + len(self.selection.removed) if self.selection else 0
        self._switch_to(target)
        self._resolve()
        logger.info("Unsaved changes discarded", target_role_id=target, dropped=dropped)
        return self.selection

    async def save_then_switch(self, persist: PersistFn) -> SelectionState:
        """Persist the current role's working set, then perform the pending switch.

        If the persist fails the guard stays in ``PENDING_CONFIRM`` and the
        error propagates, so the caller can retry, discard or cancel. If the
        working set changed while the save was in flight, the saved set
        becomes the baseline and the switch stays pending.

        Args:
            persist: Coroutine function ``(role_id, permission_ids)``.

        Raises:
            InvalidGuardTransition: If no switch is pending.
            AlreadySaving: If a save is already running.
        """
        target = self._require_pending("save_then_switch")
        selection = self.selection
        if selection is None or selection.role_id is None:
            raise InvalidGuardTransition("No role is being edited")

        saved_ids = selection.working
        self._saving = True
        try:
            await persist(selection.role_id, saved_ids)
        except Exception as e:
            logger.warning(
                "Save before switch failed",
                role_id=selection.role_id,
                target_role_id=target,
                error=str(e),
            )
            raise
        finally:
            self._saving = False

        if selection.working != saved_ids:
            selection.rebase(saved_ids)
            logger.info(
                "Selection changed during save, switch still pending",
                role_id=selection.role_id,
                target_role_id=target,
            )
            return selection

        selection.commit(saved_ids)
        self._switch_to(target)
        self._resolve()
        logger.info("Saved and switched role", role_id=selection.role_id, target_role_id=target)
        return self.selection

    def cancel(self) -> None:
        """Abandon the pending switch and keep editing the current role."""
        self._require_pending("cancel")
        logger.info(
            "Role switch cancelled",
            role_id=self.current_role_id,
            target_role_id=self.pending_role_id,
        )
        self._resolve()

    def clear(self) -> None:
        """Stop editing any role (e.g., after the active role was deleted)."""
        if self._saving:
            raise AlreadySaving(self.current_role_id)
        self.selection = None
        self._resolve()

    def _require_pending(self, action: str) -> int:
        if self.status is not GuardStatus.PENDING_CONFIRM or self.pending_role_id is None:
            raise InvalidGuardTransition(f"Cannot {action}: no role switch is pending")
        if self._saving:
            raise AlreadySaving(self.current_role_id)
        return self.pending_role_id

    def _switch_to(self, role_id: int) -> None:
        # Load first so a failing load leaves the current selection in place
        selection = self._load_role(role_id)
        previous = self.current_role_id
        self.selection = selection
        logger.info("Role switched", from_role_id=previous, to_role_id=role_id)

    def _resolve(self) -> None:
        self.status = GuardStatus.IDLE
        self.pending_role_id = None
