"""
Unit tests for the role permission model and phone validation
"""

from nco_search.auth import permissions
from nco_search.auth.permissions import Role, has_permission, permissions_for
from nco_search.schemas.common import clean_phone, is_valid_phone

class TestPermissions:

    def test_public(self):
        assert permissions_for(Role.PUBLIC) == {permissions.SEARCH, permissions.VIEW_DETAILS}
        assert not has_permission("PUBLIC", permissions.SELECT)

    def test_enumerator(self):
        assert has_permission("ENUMERATOR", permissions.SELECT)
        assert has_permission("ENUMERATOR", permissions.SAVE_SEARCH)
        assert not has_permission("ENUMERATOR", permissions.OVERRIDE)
        assert not has_permission("ENUMERATOR", permissions.MANAGE_USERS)

    def test_admin_has_everything(self):
        assert permissions_for("ADMIN") == permissions.ALL_PERMISSIONS
        assert has_permission("ADMIN", "anything-added-later")

    def test_unknown_role_is_public(self):
        assert permissions_for("SUPERUSER") == permissions_for(Role.PUBLIC)
        assert permissions_for(None) == permissions_for(Role.PUBLIC)

class TestPhoneValidation:

    def test_valid_numbers(self):
        for phone in ["9876543210", "6000000000", "(987) 654-3210", "98765 43210"]:
            assert is_valid_phone(phone)

    def test_invalid_numbers(self):
        for phone in ["", None, "5876543210", "987654321", "98765432100", "+919876543210", "98765abcde",
                      "9١٢٣٤٥٦٧٨٩", "9१२३४५६७८९"]:
            assert not is_valid_phone(phone)

    def test_clean_phone(self):
        assert clean_phone("(987) 654-3210") == "9876543210"
