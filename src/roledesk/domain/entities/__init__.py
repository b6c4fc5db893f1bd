"""Domain entities for RoleDesk.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from roledesk.domain.entities.permission import (
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    CatalogSnapshot,
    Permission,
    infer_category,
)
from roledesk.domain.entities.role import Role
from roledesk.domain.entities.role_template import (
    ROLE_TEMPLATES,
    CategoryRule,
    NamePatternRule,
    RoleTemplate,
    TemplateIcon,
    TemplateRule,
)

__all__ = [
    "CATEGORY_KEYWORDS",
    "DEFAULT_CATEGORY",
    "CatalogSnapshot",
    "CategoryRule",
    "NamePatternRule",
    "Permission",
    "ROLE_TEMPLATES",
    "Role",
    "RoleTemplate",
    "TemplateIcon",
    "TemplateRule",
    "infer_category",
]
