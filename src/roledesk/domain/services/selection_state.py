"""Editable permission selection for the role being edited.

The selection keeps two sets of permission ids: the persisted ``baseline``
and the in-progress ``working`` set. ``dirty`` is derived from the two, so
it can never disagree with them. Every mutation is validated against the
permission-id universe before it is applied; an invalid mutation raises and
leaves the selection untouched.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from roledesk.domain.entities import Role
from roledesk.domain.exceptions import UnknownPermission


class CategorySelection(str, Enum):
    """How much of a category is selected."""

    ALL = "all"
    PARTIAL = "partial"
    NONE = "none"


@dataclass(frozen=True)
class CategoryStatus:
    """Selection status of one category."""

    selected: int
    total: int
    state: CategorySelection


@dataclass(frozen=True)
class SelectionSummary:
    """Overall selection counts."""

    selected: int
    total: int
    percentage: int


class SelectionState:
    """Working set of permission ids for a single role.

    Attributes:
        role_id: Role being edited (None before any role is loaded).
        universe: Every permission id known to the catalog.
        baseline: Last persisted permission ids for the role.
        working: Permission ids currently selected.
    """

    def __init__(
        self,
        role_id: int | None,
        baseline: Iterable[int],
        universe: Iterable[int],
    ) -> None:
        self.universe = frozenset(universe)
        baseline_ids = frozenset(baseline)
        self._check_known(baseline_ids)
        self.role_id = role_id
        self._baseline = baseline_ids
        self._working = baseline_ids

    @classmethod
    def load_for_role(cls, role: Role, universe: Iterable[int]) -> "SelectionState":
        """Create a clean selection from a role's persisted permissions.

        Raises:
            UnknownPermission: If the role grants ids outside ``universe``.
        """
        return cls(role.id, role.permission_ids, universe)

    @property
    def baseline(self) -> frozenset[int]:
        return self._baseline

    @property
    def working(self) -> frozenset[int]:
        return self._working

    @property
    def dirty(self) -> bool:
        return self._working != self._baseline

    @property
    def added(self) -> frozenset[int]:
        """Ids selected but not yet persisted."""
        return self._working - self._baseline

    @property
    def removed(self) -> frozenset[int]:
        """Persisted ids that have been deselected."""
        return self._baseline - self._working

    def extend_universe(self, ids: Iterable[int]) -> None:
        """Accept ids added to the catalog after this selection was loaded.

        Working and baseline sets are left as they are.
        """
        self.universe = self.universe | frozenset(ids)

    def is_selected(self, permission_id: int) -> bool:
        return permission_id in self._working

    def toggle_permission(self, permission_id: int) -> None:
        """Flip membership of a single permission."""
        self._check_known((permission_id,))
        self._working = self._working ^ {permission_id}

    def select_all_in_category(self, category_ids: Iterable[int]) -> None:
        """Add every id of a category to the working set."""
        ids = frozenset(category_ids)
        self._check_known(ids)
        self._working = self._working | ids

    def deselect_all_in_category(self, category_ids: Iterable[int]) -> None:
        """Remove every id of a category from the working set."""
        ids = frozenset(category_ids)
        self._check_known(ids)
        self._working = self._working - ids

    def toggle_category(self, category_ids: Iterable[int]) -> None:
        """Deselect a fully selected category, otherwise select all of it."""
        ids = frozenset(category_ids)
        if ids and ids <= self._working:
            self.deselect_all_in_category(ids)
        else:
            self.select_all_in_category(ids)

    def select_all(self, all_ids: Iterable[int]) -> None:
        """Replace the working set with ``all_ids``."""
        ids = frozenset(all_ids)
        self._check_known(ids)
        self._working = ids

    def deselect_all(self) -> None:
        self._working = frozenset()

    def reset(self) -> None:
        """Drop unsaved edits."""
        self._working = self._baseline

    def commit(self, new_baseline: Iterable[int]) -> None:
        """Adopt a freshly persisted permission set as the new baseline.

        Only call this after the store confirmed the save.
        """
        ids = frozenset(new_baseline)
        self._check_known(ids)
        self._baseline = ids
        self._working = ids

    def rebase(self, new_baseline: Iterable[int]) -> None:
        """Adopt a persisted permission set as baseline, keeping the working set.

        Used when edits were made while a save was in flight: the save
        succeeded, but the working set has moved on since.
        """
        ids = frozenset(new_baseline)
        self._check_known(ids)
        self._baseline = ids

    def category_status(self, category_ids: Iterable[int]) -> CategoryStatus:
        ids = frozenset(category_ids)
        selected = len(ids & self._working)
        if ids and selected == len(ids):
            state = CategorySelection.ALL
        elif selected:
            state = CategorySelection.PARTIAL
        else:
            state = CategorySelection.NONE
        return CategoryStatus(selected=selected, total=len(ids), state=state)

    def summary(self) -> SelectionSummary:
        total = len(self.universe)
        selected = len(self._working)
        percentage = round(selected * 100 / total) if total else 0
        return SelectionSummary(selected=selected, total=total, percentage=percentage)

    def _check_known(self, ids: Iterable[int]) -> None:
        unknown = frozenset(ids) - self.universe
        if unknown:
            raise UnknownPermission(unknown)

    def __repr__(self) -> str:
        return (
            f"<SelectionState(role_id={self.role_id}, working={len(self._working)}, "
            f"baseline={len(self._baseline)}, dirty={self.dirty})>"
        )
