"""
Unit tests for user management (admin only)
"""

from nco_search.models.audit_log import AuditLog
from conftest import ADMIN_PHONE, ENUMERATOR_PHONE, INACTIVE_PHONE

class TestUserManagement:
    """Test cases for /api/users"""

    def test_list_users_requires_token(self, client):
        response = client.get("/api/users")
        assert response.status_code == 401

    def test_list_users_requires_admin(self, client, enumerator_headers):
        response = client.get("/api/users", headers=enumerator_headers)
        assert response.status_code == 403

    def test_list_active_users(self, client, admin_headers):
        response = client.get("/api/users", headers=admin_headers)
        assert response.status_code == 200

        data = response.json()
        phones = {user["phone"] for user in data["users"]}
        assert phones == {ADMIN_PHONE, ENUMERATOR_PHONE}
        assert data["total"] == 2

    def test_list_all_users(self, client, admin_headers):
        response = client.get("/api/users?include_inactive=true", headers=admin_headers)
        assert response.json()["total"] == 3

    def test_create_user(self, client, admin_headers, db_session):
        user_data = {"phone": "98765 43210", "name": "  Field Worker  "}

        response = client.post("/api/users", json=user_data, headers=admin_headers)
        assert response.status_code == 201

        data = response.json()
        assert data["phone"] == "9876543210"
        assert data["name"] == "Field Worker"
        assert data["role"] == "ENUMERATOR"
        assert data["is_active"] == True
        assert data["last_login"] is None

        assert db_session.query(AuditLog).filter(AuditLog.action == "USER_CREATE").count() == 1

    def test_create_admin_lowercase_role(self, client, admin_headers):
        response = client.post(
            "/api/users",
            json={"phone": "9876543210", "name": "Second Admin", "role": "admin"},
            headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["role"] == "ADMIN"

    def test_create_user_invalid_role(self, client, admin_headers):
        response = client.post(
            "/api/users",
            json={"phone": "9876543210", "name": "Someone", "role": "PUBLIC"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert "Role must be one of" in response.json()["error"]

    def test_create_user_invalid_phone(self, client, admin_headers):
        response = client.post(
            "/api/users",
            json={"phone": "1234567890", "name": "Someone"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert "Invalid phone number" in response.json()["error"]

    def test_create_duplicate_user(self, client, admin_headers):
        response = client.post(
            "/api/users",
            json={"phone": ENUMERATOR_PHONE, "name": "Duplicate"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "A user with this phone number already exists"

    def test_toggle_status(self, client, admin_headers):
        response = client.post(f"/api/users/{ENUMERATOR_PHONE}/toggle-status", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] == False

        # Deactivated users can no longer request a code
        response = client.post("/api/auth/request-otp", json={"phone": ENUMERATOR_PHONE})
        assert response.status_code == 403

        response = client.post(f"/api/users/{INACTIVE_PHONE}/toggle-status", headers=admin_headers)
        assert response.json()["is_active"] == True

    def test_toggle_own_status(self, client, admin_headers):
        response = client.post(f"/api/users/{ADMIN_PHONE}/toggle-status", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Cannot deactivate your own account"

    def test_toggle_unknown_user(self, client, admin_headers):
        response = client.post("/api/users/9123456789/toggle-status", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    def test_delete_user(self, client, admin_headers):
        response = client.delete(f"/api/users/{ENUMERATOR_PHONE}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "User deleted successfully"

        response = client.post("/api/auth/request-otp", json={"phone": ENUMERATOR_PHONE})
        assert response.status_code == 404

    def test_delete_own_account(self, client, admin_headers):
        response = client.delete(f"/api/users/{ADMIN_PHONE}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete your own account"

    def test_delete_unknown_user(self, client, admin_headers):
        response = client.delete("/api/users/9123456789", headers=admin_headers)
        assert response.status_code == 404

    def test_create_user_non_ascii_digits(self, client, admin_headers):
        response = client.post(
            "/api/users",
            json={"phone": "9१२३४५६७८९", "name": "Someone"},
            headers=admin_headers
        )
        assert response.status_code == 400
        assert "Invalid phone number" in response.json()["error"]
