"""Permission entity.

A permission is an atomic, named access right. Categories are free-form
strings used only for grouping and display.
"""

from dataclasses import dataclass, field


DEFAULT_CATEGORY = "other"

# Keyword -> category, checked in order against the lowercased name
CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("patient",), "patients"),
    (("visit",), "visits"),
    (("lab",), "lab"),
    (("consultation",), "consultations"),
    (("medication", "prescription"), "medications"),
    (("referral",), "referrals"),
    (("user",), "users"),
    (("organization",), "organizations"),
    (("file",), "files"),
    (("dashboard", "report", "audit"), "dashboard"),
    (("appointment",), "appointments"),
    (("billing", "invoice", "payment"), "billing"),
)


def infer_category(name: str) -> str:
    """Infer a display category from a permission name.

    Used for permissions that arrive without a category.

    Examples:
        >>> infer_category("viewLabResults")
        'lab'
        >>> infer_category("processPayment")
        'billing'
        >>> infer_category("rebootServer")
        'other'
    """
    lowered = name.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


@dataclass(frozen=True)
class Permission:
    """Permission entity, immutable once loaded.

    Attributes:
        id: Unique identifier.
        name: Permission name (e.g., 'viewPatients').
        category: Display category (e.g., 'patients').
        description: Human-readable description.
    """

    id: int
    name: str
    category: str
    description: str = ""

    def __post_init__(self) -> None:
        """Validate permission data after initialization."""
        if not self.name:
            raise ValueError("Permission name is required")

    @property
    def effective_category(self) -> str:
        """Category used for grouping and template rules.

        Falls back to :func:`infer_category` when the stored one is blank.
        """
        return self.category.strip() or infer_category(self.name)


@dataclass(frozen=True)
class CatalogSnapshot:
    """A loaded permission catalog.

    Attributes:
        all: Every permission, in source order.
        grouped: Permissions by category. Categories keep first-seen order
            and permissions keep source order within a category.
    """

    all: tuple[Permission, ...] = ()
    grouped: dict[str, tuple[Permission, ...]] = field(default_factory=dict)

    @property
    def ids(self) -> frozenset[int]:
        """All permission ids in the catalog."""
        return frozenset(p.id for p in self.all)

    def __len__(self) -> int:
        return len(self.all)
