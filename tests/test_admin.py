"""Tests for the admin API and its authorization gate."""

from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.order import Order
from app.models.user import User


class TestAdminGate:
    """Every admin route is closed to anonymous and regular users."""

    ROUTES = [
        ("GET", "/api/admin/stats"),
        ("GET", "/api/admin/users"),
        ("PATCH", "/api/admin/users/1/role"),
        ("DELETE", "/api/admin/users/1"),
    ]

    def test_anonymous_forbidden(self, client: TestClient, use_session):
        """No session means 403, not 401."""
        use_session(None)
        for method, path in self.ROUTES:
            response = client.request(method, path, json={"role": "admin"})
            assert response.status_code == 403, path
            assert response.json() == {"error": "Admin access required"}

    def test_regular_user_forbidden(self, client: TestClient, test_user: dict, use_session):
        """A signed-in user without the admin role is refused."""
        use_session(test_user["session"])
        for method, path in self.ROUTES:
            response = client.request(method, path, json={"role": "admin"})
            assert response.status_code == 403, path

    def test_user_cannot_promote_self(self, client: TestClient, test_user: dict, db_session: Session, use_session):
        """The role change route does nothing for non-admins."""
        use_session(test_user["session"])
        client.patch(f"/api/admin/users/{test_user['id']}/role", json={"role": "admin"})
        assert db_session.get(User, test_user["id"]).role == "user"


class TestAdminStats:
    """Tests for GET /api/admin/stats."""

    def test_stats_counts(self, client: TestClient, admin_user: dict, test_user: dict, use_session):
        """Counts users, admins and live sessions."""
        use_session(admin_user["session"])
        response = client.get("/api/admin/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["users"] == 2
        assert data["admins"] == 1
        assert data["verified_users"] == 0
        assert data["active_sessions"] == 2

    def test_signups_by_day(
        self, client: TestClient, admin_user: dict, test_user: dict, db_session: Session, use_session
    ):
        """Recent signups are counted per day and older ones are left out."""
        old = User(email="old@example.com", password_hash="x", created_at=datetime.utcnow() - timedelta(days=45))
        db_session.add(old)
        db_session.commit()

        use_session(admin_user["session"])
        data = client.get("/api/admin/stats").json()
        assert data["users"] == 3
        assert data["signups_by_day"] == [{"date": datetime.utcnow().date().isoformat(), "count": 2}]

    def test_users_by_plan(
        self, client: TestClient, admin_user: dict, make_user, db_session: Session, use_session
    ):
        """Users without a plan are grouped as free."""
        pro = make_user("pro@example.com")
        db_session.query(User).filter(User.id == pro["id"]).update({User.plan: "pro"})
        db_session.commit()

        use_session(admin_user["session"])
        data = client.get("/api/admin/stats").json()
        assert data["users_by_plan"] == [{"plan": "free", "count": 1}, {"plan": "pro", "count": 1}]


class TestAdminUsers:
    """Tests for listing and managing users."""

    def test_list_users_newest_first(self, client: TestClient, admin_user: dict, make_user, use_session):
        """Users come back newest first with a total."""
        make_user("first@example.com")
        make_user("second@example.com")

        use_session(admin_user["session"])
        data = client.get("/api/admin/users").json()
        assert data["total"] == 3
        assert data["page"] == 1
        assert [u["email"] for u in data["users"]] == [
            "second@example.com",
            "first@example.com",
            "admin@example.com",
        ]
        assert "password_hash" not in data["users"][0]

    def test_list_users_search(self, client: TestClient, admin_user: dict, make_user, use_session):
        """Search matches email or name, ignoring case."""
        make_user("carol@example.com", name="Carol")
        make_user("dave@example.com", name="Dave")

        use_session(admin_user["session"])
        data = client.get("/api/admin/users", params={"search": "CAROL"}).json()
        assert data["total"] == 1
        assert data["users"][0]["email"] == "carol@example.com"

    def test_list_users_paging_is_clamped(self, client: TestClient, admin_user: dict, make_user, use_session):
        """Out-of-range page and limit values are clamped."""
        make_user("one@example.com")
        make_user("two@example.com")

        use_session(admin_user["session"])
        data = client.get("/api/admin/users", params={"page": 0, "limit": 1}).json()
        assert data["page"] == 1
        assert data["limit"] == 1
        assert len(data["users"]) == 1
        assert data["total"] == 3

        data = client.get("/api/admin/users", params={"limit": 1000}).json()
        assert data["limit"] == 100

    def test_set_role(self, client: TestClient, admin_user: dict, test_user: dict, use_session):
        """Promoting a user gives them admin access on their next request."""
        use_session(admin_user["session"])
        response = client.patch(f"/api/admin/users/{test_user['id']}/role", json={"role": "admin"})
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        use_session(test_user["session"])
        assert client.get("/api/admin/stats").status_code == 200

    def test_set_invalid_role(self, client: TestClient, admin_user: dict, test_user: dict, use_session):
        """Only known roles are accepted."""
        use_session(admin_user["session"])
        response = client.patch(f"/api/admin/users/{test_user['id']}/role", json={"role": "owner"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid role"}

    def test_set_role_unknown_user(self, client: TestClient, admin_user: dict, use_session):
        """Changing the role of a missing user is 404."""
        use_session(admin_user["session"])
        response = client.patch("/api/admin/users/9999/role", json={"role": "user"})
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_delete_user(
        self, client: TestClient, admin_user: dict, test_user: dict, db_session: Session, add_order, use_session
    ):
        """Admins can delete another account, which anonymizes its orders and ends its sessions."""
        add_order("cs_admin_delete", user_id=test_user["id"], email="test@example.com")

        use_session(admin_user["session"])
        response = client.delete(f"/api/admin/users/{test_user['id']}")
        assert response.status_code == 200

        db_session.expire_all()
        assert db_session.get(User, test_user["id"]) is None
        order = db_session.query(Order).filter(Order.stripe_session_id == "cs_admin_delete").one()
        assert order.user_id is None
        assert order.email is None

        use_session(test_user["session"])
        assert client.get("/api/auth/me").status_code == 401

    def test_admin_cannot_delete_self(self, client: TestClient, admin_user: dict, use_session):
        """Self-deletion through the admin route is refused."""
        use_session(admin_user["session"])
        response = client.delete(f"/api/admin/users/{admin_user['id']}")
        assert response.status_code == 400
        assert response.json() == {"error": "Cannot delete your own account"}

    def test_delete_unknown_user(self, client: TestClient, admin_user: dict, use_session):
        """Deleting a missing user is 404."""
        use_session(admin_user["session"])
        assert client.delete("/api/admin/users/9999").status_code == 404
