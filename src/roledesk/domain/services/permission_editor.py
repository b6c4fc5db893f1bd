"""Permission editing session.

Composes the catalog, the role registry, the switch guard and the template
engine into the single object a front end drives: pick a role, filter and
toggle permissions, save, switch roles safely, and create roles from
templates.
"""

from collections.abc import Iterable

from roledesk.core.logging import get_logger
from roledesk.domain.entities import Permission, Role, RoleTemplate
from roledesk.domain.exceptions import (
    AlreadySaving,
    CatalogUnavailable,
    InvalidGuardTransition,
)
from roledesk.domain.services.permission_catalog import ALL_CATEGORIES, PermissionCatalog
from roledesk.domain.services.role_registry import RoleRegistry
from roledesk.domain.services.role_store import RoleStore
from roledesk.domain.services.role_switch_guard import (
    GuardStatus,
    RoleSwitchGuard,
    SwitchResult,
)
from roledesk.domain.services.role_template_engine import RoleDraft, RoleTemplateEngine
from roledesk.domain.services.selection_state import (
    CategoryStatus,
    SelectionState,
    SelectionSummary,
)

logger = get_logger(__name__)


class PermissionEditor:
    """Editing session over roles and their permissions.

    Attributes:
        catalog: Permission catalog.
        registry: Role registry.
        guard: Role switch guard owning the active selection.
        templates: Role template engine.
        load_error: Set when the catalog could not be loaded; cleared by a
            successful :meth:`retry`.
        search_term: Free-text permission filter.
        category_filter: Category name or ``"all"``.
        expanded_categories: Categories currently expanded in the view.
        draft: Role being created, if any.
    """

    def __init__(
        self,
        store: RoleStore,
        templates: RoleTemplateEngine | None = None,
    ) -> None:
        self.store = store
        self.catalog = PermissionCatalog(store)
        self.registry = RoleRegistry(store, self.catalog)
        self.guard = RoleSwitchGuard(self._load_selection)
        self.templates = templates or RoleTemplateEngine()
        self.load_error: CatalogUnavailable | None = None
        self.search_term = ""
        self.category_filter = ALL_CATEGORIES
        self.expanded_categories: set[str] = set()
        self.draft: RoleDraft | None = None

    # -- loading -----------------------------------------------------------

    async def open(self) -> bool:
        """Load the catalog and the roles.

        Returns:
            True when loaded, False when the catalog is unavailable (see
            :attr:`load_error`).
        """
        try:
            await self.catalog.load()
        except CatalogUnavailable as e:
            self.load_error = e
            logger.warning("Permission editor unavailable", error=str(e))
            return False

        await self.registry.refresh()
        self.load_error = None
        return True

    async def retry(self) -> bool:
        """Retry loading after a catalog failure."""
        return await self.open()

    async def refresh_catalog(self) -> None:
        """Reload the catalog without touching the working selection."""
        await self.catalog.refresh()
        if self.guard.selection is not None:
            self.guard.selection.extend_universe(self.catalog.ids)

    @property
    def is_ready(self) -> bool:
        return self.catalog.is_loaded and self.load_error is None

    def _load_selection(self, role_id: int) -> SelectionState:
        role = self.registry.get(role_id)
        return SelectionState.load_for_role(role, self.catalog.ids)

    # -- active role -------------------------------------------------------

    @property
    def selection(self) -> SelectionState | None:
        return self.guard.selection

    @property
    def current_role(self) -> Role | None:
        role_id = self.guard.current_role_id
        return self.registry.get(role_id) if role_id is not None else None

    @property
    def has_unsaved_changes(self) -> bool:
        return self.guard.dirty

    @property
    def pending_switch(self) -> int | None:
        if self.guard.status is GuardStatus.PENDING_CONFIRM:
            return self.guard.pending_role_id
        return None

    @property
    def can_save(self) -> bool:
        role_id = self.guard.current_role_id
        return (
            role_id is not None
            and self.guard.dirty
            and not self.registry.is_saving(role_id)
        )

    def select_role(self, role_id: int) -> SwitchResult:
        """Request editing of ``role_id`` (guarded by unsaved changes)."""
        self.registry.get(role_id)
        return self.guard.request_switch(role_id)

    def discard(self) -> SelectionState:
        return self.guard.discard()

    async def save_then_switch(self) -> SelectionState:
        return await self.guard.save_then_switch(self._persist)

    def cancel(self) -> None:
        self.guard.cancel()

    # -- selection ---------------------------------------------------------

    def _require_selection(self) -> SelectionState:
        if self.guard.selection is None:
            raise InvalidGuardTransition("No role is selected")
        return self.guard.selection

    def toggle_permission(self, permission_id: int) -> None:
        self._require_selection().toggle_permission(permission_id)

    def select_category(self, category: str) -> None:
        self._require_selection().select_all_in_category(self.catalog.ids_in_category(category))

    def deselect_category(self, category: str) -> None:
        self._require_selection().deselect_all_in_category(self.catalog.ids_in_category(category))

    def toggle_category(self, category: str) -> None:
        self._require_selection().toggle_category(self.catalog.ids_in_category(category))

    def select_all(self) -> None:
        self._require_selection().select_all(self.catalog.ids)

    def deselect_all(self) -> None:
        self._require_selection().deselect_all()

    def reset(self) -> None:
        self._require_selection().reset()

    def category_status(self, category: str) -> CategoryStatus:
        return self._require_selection().category_status(self.catalog.ids_in_category(category))

    def summary(self) -> SelectionSummary:
        return self._require_selection().summary()

    async def save(self) -> Role:
        """Persist the working set of the active role.

        On success the persisted ids become the new baseline. On failure
        the selection is left dirty and the error propagates.
        """
        selection = self._require_selection()
        saved_ids = selection.working
        role = await self._persist(selection.role_id, saved_ids)
        if selection is self.guard.selection:
            if selection.working == saved_ids:
                selection.commit(role.permission_ids)
            else:
                selection.rebase(role.permission_ids)
        return role

    async def _persist(self, role_id: int, permission_ids: frozenset[int]) -> Role:
        return await self.registry.update_permissions(role_id, permission_ids)

    # -- view state --------------------------------------------------------

    def filtered_permissions(self) -> dict[str, list[Permission]]:
        return self.catalog.filtered(self.search_term, self.category_filter)

    def categories(self) -> list[str]:
        """Categories visible under the current filters."""
        return list(self.filtered_permissions())

    def toggle_expanded(self, category: str) -> None:
        self.expanded_categories ^= {category}

    def expand_all(self) -> None:
        self.expanded_categories = set(self.categories())

    def collapse_all(self) -> None:
        self.expanded_categories = set()

    # -- role creation -----------------------------------------------------

    def start_draft(self) -> RoleDraft:
        self.draft = RoleDraft()
        return self.draft

    def choose_template(self, template_id: str) -> RoleTemplate:
        """Fill the draft from a template and resolve its permissions."""
        template = self.templates.get(template_id)
        draft = self.draft or self.start_draft()
        draft.apply_template(template, self.templates.resolve(template, self.catalog.all))
        return template

    def set_draft_name(self, name: str) -> None:
        (self.draft or self.start_draft()).set_name(name)

    def set_draft_description(self, description: str) -> None:
        (self.draft or self.start_draft()).set_description(description)

    async def create_role(self) -> Role:
        """Create a role from the draft and switch to it.

        The draft's resolved permission set is used when present, otherwise
        the active working set. The switch to the new role goes through the
        guard, so unsaved edits on the current role still need a decision.
        """
        draft = self.draft or RoleDraft()
        if draft.permission_ids is not None:
            permission_ids: Iterable[int] = draft.permission_ids
        elif self.guard.selection is not None:
            permission_ids = self.guard.selection.working
        else:
            permission_ids = frozenset()

        role = await self.registry.create_role(draft.name, draft.description, permission_ids)
        self.draft = None
        if self.guard.status is GuardStatus.IDLE:
            self.guard.request_switch(role.id)
        return role

    async def delete_role(self, role_id: int) -> None:
        """Delete a role, leaving the editor without a role if it was active."""
        if self.guard.is_saving:
            raise AlreadySaving(self.guard.current_role_id)
        await self.registry.delete_role(role_id)
        if self.guard.current_role_id == role_id:
            self.guard.clear()
        elif self.guard.pending_role_id == role_id:
            self.guard.cancel()
