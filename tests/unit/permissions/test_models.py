"""Unit tests for the session user record."""

import pytest
from pydantic import ValidationError

from clinicdesk.core.permissions.catalog import Permission, Role
from clinicdesk.core.permissions.models import UserRecord


pytestmark = pytest.mark.unit


class TestUserRecord:
    """Tests for UserRecord parsing and serialization."""

    def test_accepts_camel_case_wire_shape(self):
        record = UserRecord.model_validate(
            {
                "id": 7,
                "username": "mhassan",
                "fullName": "Mona Hassan",
                "role": "receptionist",
                "permissions": ["view_patients", "manage_finance"],
                "isActive": True,
            }
        )

        assert record.id == "7"
        assert record.full_name == "Mona Hassan"
        assert record.role is Role.RECEPTIONIST
        assert record.permissions == {Permission.VIEW_PATIENTS, Permission.MANAGE_FINANCE}
        assert record.is_active is True

    def test_accepts_attribute_names(self):
        record = UserRecord(id="1", username="a", full_name="A", is_active=True)
        assert record.full_name == "A"
        assert record.is_active is True

    def test_defaults_fail_closed(self):
        record = UserRecord(id="1", username="a")
        assert record.role is None
        assert record.permissions == frozenset()
        assert record.is_active is False

    def test_unknown_role_becomes_none(self):
        record = UserRecord(id="1", username="a", role="surgeon")
        assert record.role is None

    def test_non_string_role_becomes_none(self):
        record = UserRecord(id="1", username="a", role=3)
        assert record.role is None

    def test_unknown_permission_tags_are_dropped(self):
        record = UserRecord(
            id="1",
            username="a",
            permissions=["view_staff", "fly_helicopter", "VIEW_STAFF"],
        )
        assert record.permissions == {Permission.VIEW_STAFF}

    def test_single_permission_string_is_one_tag(self):
        record = UserRecord(id="1", username="a", permissions="view_reports")
        assert record.permissions == {Permission.VIEW_REPORTS}

    @pytest.mark.parametrize("value", [None, 42])
    def test_non_list_permissions_grant_nothing(self, value):
        record = UserRecord(id="1", username="a", permissions=value)
        assert record.permissions == frozenset()

    def test_record_is_immutable(self):
        record = UserRecord(id="1", username="a", is_active=True)
        with pytest.raises(ValidationError):
            record.is_active = False  # type: ignore[misc]

    def test_equal_records_hash_equal(self):
        a = UserRecord(id="1", username="a", role="nurse", permissions=["view_staff"])
        b = UserRecord(id="1", username="a", role=Role.NURSE, permissions={"view_staff"})
        assert a == b
        assert hash(a) == hash(b)

    def test_serializes_to_camel_case_with_sorted_permissions(self):
        record = UserRecord(
            id="1",
            username="a",
            full_name="Ann",
            role=Role.NURSE,
            permissions=["view_staff", "view_patients"],
            is_active=True,
        )

        assert record.model_dump(by_alias=True, mode="json") == {
            "id": "1",
            "username": "a",
            "fullName": "Ann",
            "role": "nurse",
            "permissions": ["view_patients", "view_staff"],
            "isActive": True,
        }
