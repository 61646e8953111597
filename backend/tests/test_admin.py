from uuid import uuid4

from vendor_market.core.roles import Role
from vendor_market.models import UserProfile


class TestUserRoles:
    def test_admin_lists_users_with_roles(self, client, admin_headers, organizer, vendor_user):
        response = client.get("/api/v1/admin/users", headers=admin_headers)

        assert response.status_code == 200
        roles = {user["email"]: user["role"] for user in response.json()}
        assert roles == {
            "admin@example.com": "admin",
            "organizer@example.com": "organizer",
            "vendor@example.com": "vendor",
        }

    def test_organizer_cannot_list_users(self, client, organizer_headers):
        assert client.get("/api/v1/admin/users", headers=organizer_headers).status_code == 403

    def test_admin_promotes_vendor(self, client, session, admin_headers, vendor_user):
        response = client.patch(
            f"/api/v1/admin/users/{vendor_user.id}/role",
            json={"role": "organizer"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "organizer"
        session.expire_all()
        assert session.get(UserProfile, vendor_user.id).role == Role.ORGANIZER.value

    def test_new_role_applies_on_next_request(self, client, admin_headers, vendor_user, vendor_headers):
        assert client.get("/api/v1/applications/", headers=vendor_headers).status_code == 403

        client.patch(
            f"/api/v1/admin/users/{vendor_user.id}/role",
            json={"role": "organizer"},
            headers=admin_headers,
        )

        assert client.get("/api/v1/applications/", headers=vendor_headers).status_code == 200

    def test_admin_cannot_change_own_role(self, client, admin, admin_headers):
        response = client.patch(
            f"/api/v1/admin/users/{admin.id}/role",
            json={"role": "vendor"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "You cannot change your own role"

    def test_unknown_user(self, client, admin_headers):
        response = client.patch(
            f"/api/v1/admin/users/{uuid4()}/role",
            json={"role": "organizer"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_invalid_role(self, client, admin_headers, vendor_user):
        response = client.patch(
            f"/api/v1/admin/users/{vendor_user.id}/role",
            json={"role": "superuser"},
            headers=admin_headers,
        )
        assert response.status_code == 422

    def test_missing_profile_is_created(self, client, session, admin_headers, vendor_user):
        session.delete(session.get(UserProfile, vendor_user.id))
        session.commit()

        response = client.patch(
            f"/api/v1/admin/users/{vendor_user.id}/role",
            json={"role": "admin"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        session.expire_all()
        assert session.get(UserProfile, vendor_user.id).role == "admin"


class TestTeamInvite:
    def test_invite_is_not_configured(self, client, admin_headers):
        response = client.post(
            "/api/v1/team/invite", json={"email": "new@example.com"}, headers=admin_headers
        )
        assert response.status_code == 501
        assert response.json()["detail"] == "Email invitations are not configured"

    def test_invite_requires_admin(self, client, organizer_headers):
        response = client.post(
            "/api/v1/team/invite", json={"email": "new@example.com"}, headers=organizer_headers
        )
        assert response.status_code == 403
