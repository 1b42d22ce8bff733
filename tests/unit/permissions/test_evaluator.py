"""Unit tests for the permission evaluator.

These tests verify the PermissionEvaluator logic including:
- The inactive / anonymous guard
- The admin bypass
- Any-of and all-of evaluation, including empty lists
- Role checks without bypass
- The named convenience predicates and the capability set
"""

import pytest

from clinicdesk.core.permissions.catalog import ALL_PERMISSIONS, Permission, Role
from clinicdesk.core.permissions.evaluator import PermissionEvaluator, get_evaluator
from tests.factories.user import make_record


pytestmark = pytest.mark.unit


NAMED_PREDICATES = {
    "can_view_patients": Permission.VIEW_PATIENTS,
    "can_manage_patients": Permission.MANAGE_PATIENTS,
    "can_view_staff": Permission.VIEW_STAFF,
    "can_manage_staff": Permission.MANAGE_STAFF,
    "can_view_finance": Permission.VIEW_FINANCE,
    "can_manage_finance": Permission.MANAGE_FINANCE,
    "can_view_payroll": Permission.VIEW_PAYROLL,
    "can_manage_payroll": Permission.MANAGE_PAYROLL,
    "can_view_users": Permission.VIEW_USERS,
    "can_manage_users": Permission.MANAGE_USERS,
    "can_view_reports": Permission.VIEW_REPORTS,
    "can_manage_settings": Permission.MANAGE_SETTINGS,
    "can_manage_database": Permission.MANAGE_DATABASE,
}


class TestInactiveAndAnonymous:
    """Every check fails without an active user."""

    @pytest.mark.parametrize("user", [None, make_record(Role.ADMIN, is_active=False)])
    def test_every_check_is_false(self, user):
        evaluator = PermissionEvaluator(user)

        assert evaluator.has_permission("view_patients") is False
        assert evaluator.has_any_permission(["view_patients"]) is False
        assert evaluator.has_all_permissions(["view_patients"]) is False
        assert evaluator.has_all_permissions([]) is False
        assert evaluator.has_role("admin") is False
        assert evaluator.effective_permissions() == frozenset()
        for name in NAMED_PREDICATES:
            assert getattr(evaluator, name) is False, name

    def test_inactive_user_with_grants(self):
        user = make_record(Role.NURSE, ["view_patients", "view_staff"], is_active=False)
        evaluator = PermissionEvaluator(user)

        assert evaluator.has_permission(Permission.VIEW_PATIENTS) is False
        assert evaluator.has_role(Role.NURSE) is False
        assert evaluator.is_authenticated is True
        assert evaluator.is_active is False


class TestAdminBypass:
    """Active admins pass every permission check."""

    @pytest.fixture
    def evaluator(self) -> PermissionEvaluator:
        # Admin with no explicit grants at all
        return PermissionEvaluator(make_record(Role.ADMIN, []))

    def test_any_single_tag(self, evaluator: PermissionEvaluator):
        for permission in Permission:
            assert evaluator.has_permission(permission) is True

    def test_unknown_tag(self, evaluator: PermissionEvaluator):
        assert evaluator.has_permission("launch_rockets") is True

    def test_lists_including_empty(self, evaluator: PermissionEvaluator):
        assert evaluator.has_any_permission(["manage_database", "unknown"]) is True
        assert evaluator.has_all_permissions(list(Permission)) is True
        assert evaluator.has_any_permission([]) is True
        assert evaluator.has_all_permissions([]) is True

    def test_named_predicates(self, evaluator: PermissionEvaluator):
        for name in NAMED_PREDICATES:
            assert getattr(evaluator, name) is True, name

    def test_role_check_has_no_bypass(self, evaluator: PermissionEvaluator):
        assert evaluator.has_role("admin") is True
        assert evaluator.has_role(["doctor", "admin"]) is True
        assert evaluator.has_role("doctor") is False
        assert evaluator.has_role(["nurse", "accountant"]) is False

    def test_effective_permissions_is_whole_catalog(self, evaluator: PermissionEvaluator):
        assert evaluator.effective_permissions() == ALL_PERMISSIONS
        assert evaluator.is_admin is True


class TestExplicitGrants:
    """Non-admin users hold exactly what they were granted."""

    @pytest.fixture
    def evaluator(self) -> PermissionEvaluator:
        return PermissionEvaluator(make_record(Role.RECEPTIONIST, ["view_patients"]))

    def test_single_permission(self, evaluator: PermissionEvaluator):
        assert evaluator.has_permission("view_patients") is True
        assert evaluator.has_permission("manage_patients") is False

    def test_any_of(self, evaluator: PermissionEvaluator):
        assert evaluator.has_any_permission(["manage_patients", "view_patients"]) is True
        assert evaluator.has_any_permission(["manage_patients", "view_staff"]) is False

    def test_all_of(self, evaluator: PermissionEvaluator):
        assert evaluator.has_all_permissions(["manage_patients", "view_patients"]) is False
        assert evaluator.has_all_permissions(["view_patients"]) is True

    def test_empty_lists(self, evaluator: PermissionEvaluator):
        assert evaluator.has_any_permission([]) is False
        assert evaluator.has_all_permissions([]) is True

    def test_role_bundle_is_not_implied(self):
        """A role without grants holds nothing; bundles apply at account creation."""
        evaluator = PermissionEvaluator(make_record(Role.DOCTOR, []))
        assert evaluator.has_permission("view_patients") is False

    def test_unknown_tag_is_false(self, evaluator: PermissionEvaluator):
        assert evaluator.has_permission("launch_rockets") is False
        assert evaluator.has_any_permission(["launch_rockets"]) is False

    @pytest.mark.parametrize("bad", [None, 3, ["view_patients"], {"a": 1}])
    def test_malformed_input_never_raises(self, evaluator: PermissionEvaluator, bad):
        assert evaluator.has_permission(bad) is False  # type: ignore[arg-type]

    def test_string_list_argument_is_one_tag(self, evaluator: PermissionEvaluator):
        """A bare string is a single tag, not a list of characters."""
        assert evaluator.has_any_permission("view_patients") is True
        assert evaluator.has_all_permissions("manage_patients") is False

    @pytest.mark.parametrize(("name", "permission"), NAMED_PREDICATES.items())
    def test_named_predicate_matches_has_permission(self, name: str, permission: Permission):
        granted = PermissionEvaluator(make_record(Role.NURSE, [permission]))
        not_granted = PermissionEvaluator(
            make_record(Role.NURSE, [p for p in Permission if p != permission])
        )

        assert getattr(granted, name) is True
        assert getattr(not_granted, name) is False


class TestRoles:
    """Tests for has_role."""

    @pytest.fixture
    def evaluator(self) -> PermissionEvaluator:
        return PermissionEvaluator(make_record(Role.DOCTOR, ["view_patients"]))

    def test_single_role(self, evaluator: PermissionEvaluator):
        assert evaluator.has_role("doctor") is True
        assert evaluator.has_role(Role.DOCTOR) is True
        assert evaluator.has_role("nurse") is False

    def test_role_list(self, evaluator: PermissionEvaluator):
        assert evaluator.has_role(["nurse", "doctor"]) is True
        assert evaluator.has_role(("nurse", "accountant")) is False
        assert evaluator.has_role([]) is False

    def test_unknown_role_matches_nothing(self):
        evaluator = PermissionEvaluator(make_record("surgeon", ["view_patients"]))

        assert evaluator.current_role is None
        assert evaluator.has_role("surgeon") is False
        assert evaluator.has_permission("view_patients") is True


class TestCapabilities:
    """Tests for the resolved capability set."""

    def test_capabilities_for_accountant(self):
        user = make_record(Role.ACCOUNTANT, ["view_finance", "view_payroll"])
        capabilities = PermissionEvaluator(user).capabilities()

        assert capabilities.is_active is True
        assert capabilities.is_admin is False
        assert capabilities.current_role is Role.ACCOUNTANT
        assert capabilities.permissions == [Permission.VIEW_FINANCE, Permission.VIEW_PAYROLL]
        assert capabilities.can_view_payroll is True
        assert capabilities.can_manage_payroll is False

    def test_capabilities_serialize_camel_case(self):
        capabilities = PermissionEvaluator(make_record(Role.ADMIN)).capabilities()
        data = capabilities.model_dump(by_alias=True, mode="json")

        assert data["isAdmin"] is True
        assert data["currentRole"] == "admin"
        assert data["canManageDatabase"] is True
        assert len(data["permissions"]) == len(Permission)

    def test_capabilities_without_user(self):
        capabilities = PermissionEvaluator(None).capabilities()

        assert capabilities.is_active is False
        assert capabilities.current_role is None
        assert capabilities.permissions == []
        assert capabilities.can_view_patients is False


class TestGetEvaluator:
    """Tests for the memoized evaluator lookup."""

    def test_same_record_same_evaluator(self):
        user = make_record(Role.NURSE, ["view_staff"], id="42", username="n")
        twin = make_record(Role.NURSE, ["view_staff"], id="42", username="n")

        assert get_evaluator(user) is get_evaluator(twin)

    def test_changed_record_new_evaluator(self):
        user = make_record(Role.NURSE, ["view_staff"], id="42", username="n")
        promoted = user.model_copy(update={"permissions": frozenset({Permission.VIEW_USERS})})

        assert get_evaluator(user) is not get_evaluator(promoted)
        assert get_evaluator(promoted).can_view_users is True

    def test_repeated_evaluation_is_stable(self):
        user = make_record(Role.DOCTOR, ["view_patients", "view_reports"])
        evaluator = get_evaluator(user)

        first = [
            evaluator.has_permission("view_patients"),
            evaluator.has_any_permission(["manage_staff", "view_reports"]),
            evaluator.has_all_permissions(["view_patients", "manage_patients"]),
            evaluator.has_role("doctor"),
        ]
        for _ in range(3):
            again = [
                evaluator.has_permission("view_patients"),
                evaluator.has_any_permission(["manage_staff", "view_reports"]),
                evaluator.has_all_permissions(["view_patients", "manage_patients"]),
                evaluator.has_role("doctor"),
            ]
            assert again == first
        assert first == [True, True, False, True]
