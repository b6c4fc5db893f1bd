"""Role template resolution.

Derives the permission-id set of a new role from a template's matcher
rules, and tracks the proposed name/description of a role being created.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from roledesk.domain.entities import ROLE_TEMPLATES, Permission, RoleTemplate
from roledesk.domain.exceptions import UnknownTemplate


class RoleTemplateEngine:
    """Resolves role templates against a permission catalog."""

    def __init__(self, templates: Iterable[RoleTemplate] = ROLE_TEMPLATES) -> None:
        """Initialize the engine.

        Args:
            templates: Available templates (defaults to the built-in set).

        Raises:
            ValueError: If two templates share an id.
        """
        self._templates: dict[str, RoleTemplate] = {}
        for template in templates:
            if template.id in self._templates:
                raise ValueError(f"Duplicate role template id '{template.id}'")
            self._templates[template.id] = template

    def list_templates(self) -> list[RoleTemplate]:
        return list(self._templates.values())

    def get(self, template_id: str) -> RoleTemplate:
        """Get a template by id.

        Raises:
            UnknownTemplate: If no template has this id.
        """
        try:
            return self._templates[template_id]
        except KeyError:
            raise UnknownTemplate(template_id) from None

    @staticmethod
    def resolve(template: RoleTemplate, all_permissions: Iterable[Permission]) -> frozenset[int]:
        """Resolve a template into permission ids.

        Each rule is evaluated against every permission and the matches are
        unioned. The result depends only on the template and the catalog.

        Args:
            template: Template to resolve.
            all_permissions: The full permission catalog.

        Returns:
            Ids of every permission matched by at least one rule.
        """
        return frozenset(
            permission.id
            for permission in all_permissions
            if any(rule.matches(permission) for rule in template.matchers)
        )

    def preview(
        self, template: RoleTemplate, all_permissions: Iterable[Permission]
    ) -> dict[str, list[Permission]]:
        """Resolved permissions of a template, grouped by category."""
        permissions = list(all_permissions)
        ids = self.resolve(template, permissions)
        grouped: dict[str, list[Permission]] = {}
        for permission in permissions:
            if permission.id in ids:
                grouped.setdefault(permission.effective_category, []).append(permission)
        return grouped


@dataclass
class RoleDraft:
    """Proposed role being created.

    Choosing a template fills in name and description and marks the
    permission set as template-derived. Editing the name or description
    afterwards unlinks the template but keeps the resolved permission ids.

    Attributes:
        name: Proposed role name.
        description: Proposed role description.
        template: Linked template, or None for a plain custom role.
        permission_ids: Resolved permission ids, or None when the draft
            should use the editor's current selection.
    """

    name: str = ""
    description: str = ""
    template: RoleTemplate | None = None
    permission_ids: frozenset[int] | None = field(default=None)

    @property
    def is_template_derived(self) -> bool:
        return self.template is not None

    def apply_template(self, template: RoleTemplate, permission_ids: Iterable[int]) -> None:
        self.template = template
        self.name = template.name
        self.description = template.description
        self.permission_ids = frozenset(permission_ids)

    def set_name(self, name: str) -> None:
        if name != self.name:
            self.template = None
        self.name = name

    def set_description(self, description: str) -> None:
        if description != self.description:
            self.template = None
        self.description = description
