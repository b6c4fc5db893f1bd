"""Unit tests for domain entities."""

import pytest

from roledesk.domain.entities import (
    ROLE_TEMPLATES,
    CatalogSnapshot,
    CategoryRule,
    NamePatternRule,
    Permission,
    Role,
    RoleTemplate,
    TemplateIcon,
)


class TestPermission:
    def test_name_required(self):
        with pytest.raises(ValueError, match="name is required"):
            Permission(1, "", "patients")

    def test_is_frozen(self):
        permission = Permission(1, "viewPatients", "patients")
        with pytest.raises(AttributeError):
            permission.name = "other"

    def test_effective_category_falls_back_to_inferred(self):
        assert Permission(1, "viewLabResults", "  ").effective_category == "lab"
        assert Permission(2, "viewLabResults", "diagnostics").effective_category == "diagnostics"


class TestCatalogSnapshot:
    def test_ids_and_len(self, permissions):
        snapshot = CatalogSnapshot(all=tuple(permissions))
        assert len(snapshot) == 10
        assert snapshot.ids == frozenset(range(1, 11))

    def test_empty_by_default(self):
        snapshot = CatalogSnapshot()
        assert len(snapshot) == 0
        assert snapshot.ids == frozenset()


class TestRole:
    def test_blank_name_rejected(self):
        with pytest.raises(ValueError, match="Role name is required"):
            Role(None, "   ")

    def test_permission_ids_coerced_to_frozenset(self):
        role = Role(1, "Doctor", permission_ids=[3, 1, 3])
        assert role.permission_ids == frozenset({1, 3})

    def test_with_permissions_returns_copy(self):
        role = Role(1, "Doctor", permission_ids=frozenset({1}))
        updated = role.with_permissions({2, 3})
        assert updated.permission_ids == frozenset({2, 3})
        assert role.permission_ids == frozenset({1})
        assert updated.name == "Doctor"


class TestTemplateRules:
    def test_category_rule_is_case_insensitive(self):
        rule = CategoryRule("Patients")
        assert rule.matches(Permission(1, "viewPatients", "patients"))
        assert not rule.matches(Permission(2, "viewVisits", "visits"))

    def test_category_rule_uses_inferred_category_when_blank(self):
        rule = CategoryRule("lab")
        assert rule.matches(Permission(6, "viewLabResults", ""))
        assert not rule.matches(Permission(7, "viewLabResults", "diagnostics"))

    def test_name_pattern_rule_matches_substring(self):
        rule = NamePatternRule("view")
        assert rule.matches(Permission(1, "viewPatients", "patients"))
        assert rule.matches(Permission(2, "VIEWVisits", "visits"))
        assert not rule.matches(Permission(3, "editPatients", "patients"))

    @pytest.mark.parametrize("rule_cls", [CategoryRule, NamePatternRule])
    def test_blank_rule_rejected(self, rule_cls):
        with pytest.raises(ValueError):
            rule_cls("  ")

    def test_template_requires_matchers(self):
        with pytest.raises(ValueError):
            RoleTemplate("empty", "Empty", "", TemplateIcon.EYE, ())


class TestBuiltinTemplates:
    def test_eight_templates_with_unique_ids(self):
        ids = [t.id for t in ROLE_TEMPLATES]
        assert len(ids) == 8
        assert len(set(ids)) == 8

    def test_every_icon_is_a_template_icon(self):
        assert all(isinstance(t.icon, TemplateIcon) for t in ROLE_TEMPLATES)

    def test_doctor_template(self):
        doctor = next(t for t in ROLE_TEMPLATES if t.id == "doctor")
        assert doctor.name == "Doctor"
        assert doctor.icon is TemplateIcon.STETHOSCOPE
        assert CategoryRule("patients") in doctor.matchers
