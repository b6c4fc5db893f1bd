"""Unit tests for SelectionState."""

import pytest

from roledesk.domain.entities import Role
from roledesk.domain.exceptions import UnknownPermission
from roledesk.domain.services import CategorySelection, SelectionState

UNIVERSE = frozenset(range(1, 11))
PATIENTS = frozenset({1, 2, 3})
LAB = frozenset({6, 7})


@pytest.fixture
def selection() -> SelectionState:
    return SelectionState.load_for_role(Role(1, "Doctor", permission_ids={1, 6}), UNIVERSE)


class TestLoad:
    def test_load_is_clean(self, selection):
        assert selection.role_id == 1
        assert selection.baseline == frozenset({1, 6})
        assert selection.working == frozenset({1, 6})
        assert not selection.dirty

    def test_load_rejects_ids_outside_universe(self):
        with pytest.raises(UnknownPermission) as exc_info:
            SelectionState.load_for_role(Role(1, "Doctor", permission_ids={1, 99}), UNIVERSE)
        assert exc_info.value.permission_ids == frozenset({99})


class TestToggle:
    @pytest.mark.parametrize("permission_id", sorted(UNIVERSE))
    def test_double_toggle_restores_state(self, selection, permission_id):
        before, was_dirty = selection.working, selection.dirty
        selection.toggle_permission(permission_id)
        selection.toggle_permission(permission_id)
        assert selection.working == before
        assert selection.dirty == was_dirty

    def test_toggle_adds_and_removes(self, selection):
        selection.toggle_permission(2)
        assert selection.is_selected(2)
        assert selection.added == frozenset({2})

        selection.toggle_permission(1)
        assert not selection.is_selected(1)
        assert selection.removed == frozenset({1})

    def test_unknown_id_leaves_working_untouched(self, selection):
        with pytest.raises(UnknownPermission):
            selection.toggle_permission(42)
        assert selection.working == frozenset({1, 6})
        assert not selection.dirty


class TestDirty:
    def test_mutation_marks_dirty(self, selection):
        selection.toggle_permission(3)
        assert selection.dirty

    def test_mutation_back_to_baseline_is_clean(self, selection):
        selection.select_all(UNIVERSE)
        selection.select_all({1, 6})
        assert not selection.dirty

    def test_reset_clears_dirty(self, selection):
        selection.select_all(UNIVERSE)
        selection.reset()
        assert selection.working == frozenset({1, 6})
        assert not selection.dirty

    def test_commit_sets_new_baseline(self, selection):
        selection.toggle_permission(2)
        selection.commit(selection.working)
        assert selection.baseline == frozenset({1, 2, 6})
        assert not selection.dirty

    def test_commit_rejects_unknown_ids(self, selection):
        with pytest.raises(UnknownPermission):
            selection.commit({1, 500})
        assert selection.baseline == frozenset({1, 6})

    def test_rebase_keeps_working_set(self, selection):
        selection.toggle_permission(2)
        saved = selection.working
        selection.toggle_permission(3)
        selection.rebase(saved)
        assert selection.baseline == frozenset({1, 2, 6})
        assert selection.working == frozenset({1, 2, 3, 6})
        assert selection.dirty

    def test_extend_universe_accepts_new_ids(self, selection):
        with pytest.raises(UnknownPermission):
            selection.toggle_permission(11)
        selection.extend_universe({11})
        selection.toggle_permission(11)
        assert selection.baseline == frozenset({1, 6})
        assert selection.working == frozenset({1, 6, 11})

    def test_deselect_all(self, selection):
        selection.deselect_all()
        assert selection.working == frozenset()
        assert selection.dirty


class TestCategories:
    def test_select_then_deselect_category_leaves_others_unchanged(self, selection):
        outside = selection.working - PATIENTS
        selection.select_all_in_category(PATIENTS)
        assert PATIENTS <= selection.working
        selection.deselect_all_in_category(PATIENTS)
        assert selection.working - PATIENTS == outside
        assert not (selection.working & PATIENTS)

    def test_select_category_rejects_unknown_ids(self, selection):
        with pytest.raises(UnknownPermission):
            selection.select_all_in_category({1, 2, 77})
        assert selection.working == frozenset({1, 6})

    def test_toggle_category_selects_partial_category(self, selection):
        selection.toggle_category(PATIENTS)
        assert PATIENTS <= selection.working

    def test_toggle_category_deselects_full_category(self, selection):
        selection.select_all_in_category(LAB)
        selection.toggle_category(LAB)
        assert not (selection.working & LAB)

    def test_toggle_empty_category_is_noop(self, selection):
        selection.toggle_category(frozenset())
        assert not selection.dirty

    def test_category_status(self, selection):
        assert selection.category_status(PATIENTS).state is CategorySelection.PARTIAL
        assert selection.category_status({4, 5}).state is CategorySelection.NONE

        selection.select_all_in_category(LAB)
        status = selection.category_status(LAB)
        assert status.state is CategorySelection.ALL
        assert (status.selected, status.total) == (2, 2)

    def test_summary(self, selection):
        summary = selection.summary()
        assert (summary.selected, summary.total, summary.percentage) == (2, 10, 20)

    def test_summary_rounds_percentage(self):
        selection = SelectionState(1, {1}, {1, 2, 3})
        assert selection.summary().percentage == 33

    def test_summary_of_empty_universe(self):
        assert SelectionState(None, (), ()).summary().percentage == 0
