"""Unit tests for RoleSwitchGuard."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from roledesk.domain.entities import Role
from roledesk.domain.exceptions import AlreadySaving, InvalidGuardTransition, RoleNotFound
from roledesk.domain.services import GuardStatus, RoleSwitchGuard, SelectionState, SwitchResult

UNIVERSE = frozenset({1, 2, 3})


@pytest.fixture
def stored_roles() -> dict[int, Role]:
    return {
        1: Role(1, "R1", permission_ids={1}),
        2: Role(2, "R2", permission_ids={3}),
        3: Role(3, "R3"),
    }


@pytest.fixture
def guard(stored_roles) -> RoleSwitchGuard:
    def load_role(role_id: int) -> SelectionState:
        if role_id not in stored_roles:
            raise RoleNotFound(role_id)
        return SelectionState.load_for_role(stored_roles[role_id], UNIVERSE)

    guard = RoleSwitchGuard(load_role)
    guard.request_switch(1)
    return guard


class TestRequestSwitch:
    def test_initial_switch_from_nothing(self, stored_roles):
        guard = RoleSwitchGuard(lambda rid: SelectionState.load_for_role(stored_roles[rid], UNIVERSE))
        assert guard.current_role_id is None
        assert guard.request_switch(2) is SwitchResult.SWITCHED
        assert guard.current_role_id == 2

    def test_clean_switch_happens_immediately(self, guard):
        assert guard.request_switch(2) is SwitchResult.SWITCHED
        assert guard.current_role_id == 2
        assert guard.status is GuardStatus.IDLE

    def test_same_role_is_unchanged(self, guard):
        guard.selection.toggle_permission(2)
        assert guard.request_switch(1) is SwitchResult.UNCHANGED
        assert guard.selection.dirty

    def test_dirty_switch_waits_for_confirmation(self, guard):
        guard.selection.toggle_permission(2)

        assert guard.request_switch(2) is SwitchResult.PENDING_CONFIRM
        assert guard.status is GuardStatus.PENDING_CONFIRM
        assert guard.pending_role_id == 2
        assert guard.current_role_id == 1
        assert guard.selection.working == frozenset({1, 2})

    def test_second_request_while_pending_is_rejected(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)
        with pytest.raises(InvalidGuardTransition):
            guard.request_switch(3)
        assert guard.pending_role_id == 2

    def test_failed_load_keeps_current_selection(self, guard):
        with pytest.raises(RoleNotFound):
            guard.request_switch(99)
        assert guard.current_role_id == 1


class TestConfirmActions:
    @pytest.mark.parametrize("action", ["discard", "cancel"])
    def test_confirm_actions_require_pending(self, guard, action):
        with pytest.raises(InvalidGuardTransition):
            getattr(guard, action)()

    @pytest.mark.asyncio
    async def test_save_then_switch_requires_pending(self, guard):
        with pytest.raises(InvalidGuardTransition):
            await guard.save_then_switch(AsyncMock())

    def test_discard_drops_edits_and_switches(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)

        selection = guard.discard()

        assert selection.role_id == 2
        assert selection.working == frozenset({3})
        assert not selection.dirty
        assert guard.status is GuardStatus.IDLE

    def test_cancel_keeps_edits(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)

        guard.cancel()

        assert guard.status is GuardStatus.IDLE
        assert guard.pending_role_id is None
        assert guard.current_role_id == 1
        assert guard.selection.working == frozenset({1, 2})

    @pytest.mark.asyncio
    async def test_save_then_switch(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)
        persist = AsyncMock()

        selection = await guard.save_then_switch(persist)

        persist.assert_awaited_once_with(1, frozenset({1, 2}))
        assert selection.role_id == 2
        assert guard.status is GuardStatus.IDLE

    @pytest.mark.asyncio
    async def test_failed_save_stays_pending(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)
        persist = AsyncMock(side_effect=ConnectionError("offline"))

        with pytest.raises(ConnectionError):
            await guard.save_then_switch(persist)

        assert guard.status is GuardStatus.PENDING_CONFIRM
        assert guard.current_role_id == 1
        assert guard.selection.dirty
        assert not guard.is_saving

    @pytest.mark.asyncio
    async def test_actions_rejected_while_saving(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)
        release = asyncio.Event()

        async def slow_persist(role_id, permission_ids):
            await release.wait()

        task = asyncio.create_task(guard.save_then_switch(slow_persist))
        await asyncio.sleep(0)
        assert guard.is_saving

        with pytest.raises(AlreadySaving):
            guard.discard()
        with pytest.raises(AlreadySaving):
            guard.cancel()
        with pytest.raises(AlreadySaving):
            await guard.save_then_switch(AsyncMock())

        release.set()
        await task
        assert guard.current_role_id == 2

    @pytest.mark.asyncio
    async def test_edits_during_save_keep_switch_pending(self, guard):
        guard.selection.toggle_permission(2)
        guard.request_switch(2)
        selection = guard.selection

        async def persist(role_id, permission_ids):
            selection.toggle_permission(3)

        await guard.save_then_switch(persist)

        assert guard.status is GuardStatus.PENDING_CONFIRM
        assert guard.current_role_id == 1
        assert selection.baseline == frozenset({1, 2})
        assert selection.working == frozenset({1, 2, 3})


class TestExampleScenario:
    def test_select_category_then_discard(self):
        roles = {1: Role(1, "R1", permission_ids={1}), 2: Role(2, "R2")}
        guard = RoleSwitchGuard(lambda rid: SelectionState.load_for_role(roles[rid], UNIVERSE))

        guard.request_switch(1)
        assert guard.selection.baseline == guard.selection.working == frozenset({1})
        assert not guard.dirty

        guard.selection.select_all_in_category([1, 2])
        assert guard.selection.working == frozenset({1, 2})
        assert guard.dirty

        assert guard.request_switch(2) is SwitchResult.PENDING_CONFIRM
        assert guard.current_role_id == 1

        guard.discard()
        assert guard.current_role_id == 2
        assert guard.selection.working == frozenset()
        assert not guard.dirty


def test_clear(guard):
    guard.clear()
    assert guard.selection is None
    assert guard.status is GuardStatus.IDLE
