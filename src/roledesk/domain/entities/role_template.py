"""Role templates for bootstrapping new roles.

Templates are static, read-only configuration. Each template carries a set
of matcher rules that select permissions from the catalog, either by
category or by a fragment of the permission name.
"""

from dataclasses import dataclass
from enum import Enum

from roledesk.domain.entities.permission import Permission


class TemplateIcon(str, Enum):
    """Icons available to role templates."""

    STETHOSCOPE = "stethoscope"
    HEART = "heart"
    PILL = "pill"
    ACTIVITY = "activity"
    CLIPBOARD_LIST = "clipboard-list"
    SHIELD = "shield"
    FLASK_CONICAL = "flask-conical"
    EYE = "eye"


@dataclass(frozen=True)
class CategoryRule:
    """Matches every permission in a category (case-insensitive)."""

    category: str

    def __post_init__(self) -> None:
        if not self.category.strip():
            raise ValueError("Category rule requires a category name")

    def matches(self, permission: Permission) -> bool:
        return permission.effective_category.casefold() == self.category.casefold()


@dataclass(frozen=True)
class NamePatternRule:
    """Matches permissions whose name contains ``pattern`` (case-insensitive)."""

    pattern: str

    def __post_init__(self) -> None:
        if not self.pattern.strip():
            raise ValueError("Name pattern rule requires a pattern")

    def matches(self, permission: Permission) -> bool:
        return self.pattern.casefold() in permission.name.casefold()


TemplateRule = CategoryRule | NamePatternRule


@dataclass(frozen=True)
class RoleTemplate:
    """Predefined permission selection used to create a role.

    Attributes:
        id: Stable template identifier (e.g., 'doctor').
        name: Proposed role name.
        description: Proposed role description.
        icon: Display icon.
        matchers: Rules whose matches are unioned into the permission set.
    """

    id: str
    name: str
    description: str
    icon: TemplateIcon
    matchers: tuple[TemplateRule, ...]

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Template id is required")
        if not self.matchers:
            raise ValueError(f"Template '{self.id}' must define at least one matcher")


ROLE_TEMPLATES: tuple[RoleTemplate, ...] = (
    RoleTemplate(
        id="doctor",
        name="Doctor",
        description="Full clinical access - patient management, prescriptions, lab orders, consultations",
        icon=TemplateIcon.STETHOSCOPE,
        matchers=(
            CategoryRule("patients"),
            CategoryRule("visits"),
            CategoryRule("lab"),
            CategoryRule("consultations"),
            CategoryRule("medications"),
            CategoryRule("referrals"),
            NamePatternRule("view"),
        ),
    ),
    RoleTemplate(
        id="nurse",
        name="Nurse",
        description="Patient care - view patients, create visits, record vitals, view lab results",
        icon=TemplateIcon.HEART,
        matchers=(
            CategoryRule("visits"),
            NamePatternRule("vitals"),
            NamePatternRule("view"),
        ),
    ),
    RoleTemplate(
        id="pharmacist",
        name="Pharmacist",
        description="Medication management - view prescriptions, manage medications, dispense drugs",
        icon=TemplateIcon.PILL,
        matchers=(
            CategoryRule("medications"),
            NamePatternRule("dispense"),
            NamePatternRule("view"),
        ),
    ),
    RoleTemplate(
        id="physiotherapist",
        name="Physiotherapist",
        description="Physical therapy - consultations, forms, patient assessments",
        icon=TemplateIcon.ACTIVITY,
        matchers=(
            CategoryRule("consultations"),
            NamePatternRule("viewPatients"),
            NamePatternRule("viewVisits"),
        ),
    ),
    RoleTemplate(
        id="receptionist",
        name="Receptionist",
        description="Front desk - patient registration, appointments, basic patient viewing",
        icon=TemplateIcon.CLIPBOARD_LIST,
        matchers=(
            CategoryRule("appointments"),
            NamePatternRule("createPatients"),
            NamePatternRule("viewPatients"),
        ),
    ),
    RoleTemplate(
        id="admin",
        name="Administrator",
        description="Organization management - staff, settings, reports, full access",
        icon=TemplateIcon.SHIELD,
        matchers=(
            CategoryRule("users"),
            CategoryRule("organizations"),
            CategoryRule("dashboard"),
            NamePatternRule("manage"),
            NamePatternRule("view"),
        ),
    ),
    RoleTemplate(
        id="lab-technician",
        name="Lab Technician",
        description="Laboratory operations - create lab orders, update results, view patient data",
        icon=TemplateIcon.FLASK_CONICAL,
        matchers=(
            CategoryRule("lab"),
            NamePatternRule("viewPatients"),
        ),
    ),
    RoleTemplate(
        id="read-only",
        name="Read-Only Viewer",
        description="View-only access - can view data but cannot create or edit",
        icon=TemplateIcon.EYE,
        matchers=(NamePatternRule("view"),),
    ),
)
