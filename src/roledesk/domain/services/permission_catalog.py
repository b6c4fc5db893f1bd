"""Permission catalog service.

Owns the full permission set and its category grouping, and provides the
search/category filter used by the editor. The catalog is read-only once
loaded; a refresh replaces the snapshot and nothing else.
"""

from collections.abc import Iterable

from roledesk.core.logging import get_logger
from roledesk.domain.entities import (  # noqa: F401
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    CatalogSnapshot,
    Permission,
    infer_category,
)
from roledesk.domain.exceptions import CatalogUnavailable
from roledesk.domain.services.role_store import RoleStore

logger = get_logger(__name__)

ALL_CATEGORIES = "all"


def group_permissions(permissions: Iterable[Permission]) -> dict[str, tuple[Permission, ...]]:
    """Group permissions by category.

    Categories keep first-seen order and permissions keep source order.
    Blank categories are replaced with an inferred one.
    """
    grouped: dict[str, list[Permission]] = {}
    for permission in permissions:
        category = permission.effective_category
        grouped.setdefault(category, []).append(permission)
    return {category: tuple(perms) for category, perms in grouped.items()}


class PermissionCatalog:
    """Loads and serves the permission catalog."""

    def __init__(self, store: RoleStore) -> None:
        """Initialize the catalog.

        Args:
            store: Persistence boundary supplying permission records.
        """
        self.store = store
        self._snapshot: CatalogSnapshot | None = None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> CatalogSnapshot:
        """The loaded catalog (empty until :meth:`load` succeeds)."""
        return self._snapshot or CatalogSnapshot()

    @property
    def all(self) -> tuple[Permission, ...]:
        return self.snapshot.all

    @property
    def grouped(self) -> dict[str, tuple[Permission, ...]]:
        return self.snapshot.grouped

    @property
    def ids(self) -> frozenset[int]:
        return self.snapshot.ids

    @property
    def categories(self) -> list[str]:
        return list(self.snapshot.grouped)

    async def load(self) -> CatalogSnapshot:
        """Load the catalog from the store.

        When the store returns no permissions, one seed attempt is made
        before giving up.

        Returns:
            The loaded catalog snapshot.

        Raises:
            CatalogUnavailable: If the store fails or the catalog stays empty.
        """
        permissions = await self._fetch()

        if not permissions:
            logger.warning("Permission catalog is empty, requesting seed")
            try:
                seeded = await self.store.seed_permissions()
            except Exception as e:
                logger.error("Permission catalog seed failed", error=str(e))
                raise CatalogUnavailable("Permission catalog is empty and seeding failed") from e
            logger.info("Permission catalog seeded", seeded=seeded)
            permissions = await self._fetch()

        if not permissions:
            raise CatalogUnavailable("Permission catalog is empty")

        self._snapshot = CatalogSnapshot(
            all=tuple(permissions),
            grouped=group_permissions(permissions),
        )
        logger.info(
            "Permission catalog loaded",
            permissions=len(self._snapshot),
            categories=len(self._snapshot.grouped),
        )
        return self._snapshot

    async def refresh(self) -> CatalogSnapshot:
        """Reload the catalog.

        Only the catalog snapshot is replaced; any selection built on the
        previous snapshot is left as it is. On failure the previous snapshot
        is kept.
        """
        return await self.load()

    async def _fetch(self) -> list[Permission]:
        try:
            return list(await self.store.list_permissions())
        except Exception as e:
            logger.error("Failed to fetch permissions", error=str(e))
            raise CatalogUnavailable(f"Failed to fetch permissions: {e}") from e

    def get(self, permission_id: int) -> Permission | None:
        """Get a permission by id."""
        for permission in self.snapshot.all:
            if permission.id == permission_id:
                return permission
        return None

    def ids_in_category(self, category: str) -> frozenset[int]:
        """Ids of every permission in ``category`` (empty if unknown)."""
        return frozenset(p.id for p in self.snapshot.grouped.get(category, ()))

    def filtered(
        self, search_term: str = "", category_filter: str = ALL_CATEGORIES
    ) -> dict[str, list[Permission]]:
        """Filter the loaded catalog. See :meth:`filter`."""
        return self.filter(self.snapshot.all, search_term, category_filter)

    @staticmethod
    def filter(
        permissions: Iterable[Permission],
        search_term: str = "",
        category_filter: str = ALL_CATEGORIES,
    ) -> dict[str, list[Permission]]:
        """Filter and group permissions.

        A permission matches when ``search_term`` is blank or is a
        case-insensitive substring of its name or description, and its
        category equals ``category_filter`` (or the filter is ``"all"``).
        Categories left with no matches are omitted.

        Args:
            permissions: Permissions in source order.
            search_term: Free-text search.
            category_filter: Category name or ``"all"``.

        Returns:
            Matching permissions by category, in first-seen category order.
        """
        needle = search_term.casefold() if search_term.strip() else ""
        result: dict[str, list[Permission]] = {}

        for category, perms in group_permissions(permissions).items():
            if category_filter != ALL_CATEGORIES and category != category_filter:
                continue
            matching = [
                p
                for p in perms
                if not needle
                or needle in p.name.casefold()
                or needle in p.description.casefold()
            ]
            if matching:
                result[category] = matching

        return result
