"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the test environment must be in place first.
os.environ["APP_ENV"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite://"
for _name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD"):
    os.environ.pop(_name, None)

from concurrent.futures import Executor, Future  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app import database  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.database import Base  # noqa: E402
from app.models.order import Order  # noqa: E402, F401
from app.models.session import UserSession  # noqa: E402, F401
from app.models.token import EmailVerification, PasswordReset  # noqa: E402, F401
from app.models.user import ROLE_USER, User  # noqa: E402
from app.services import background  # noqa: E402
from app.services.notifications import NotificationSender  # noqa: E402

SESSION_COOKIE = get_settings().SESSION_COOKIE_NAME


class InlineExecutor(Executor):
    """Runs detached tasks immediately so their effects are visible to assertions."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


@pytest.fixture(name="engine")
def engine_fixture(tmp_path):
    """Create a file-backed SQLite database and point SessionLocal at it."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    database.SessionLocal.configure(bind=engine)
    try:
        yield engine
    finally:
        database.SessionLocal.configure(bind=database.engine)
        engine.dispose()


@pytest.fixture(name="db_session")
def db_session_fixture(engine):
    """A session for arranging and inspecting rows. Call expire_all() before reading after a request."""
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def inline_background(monkeypatch):
    """Run detached tasks inline."""
    monkeypatch.setattr(background, "_executor", InlineExecutor())


@pytest.fixture(name="outbox")
def outbox_fixture(monkeypatch) -> list[dict]:
    """Capture outgoing emails instead of sending them."""
    sent: list[dict] = []

    def fake_send(self, to: str, subject: str, html: str) -> bool:
        sent.append({"to": to, "subject": subject, "html": html})
        return True

    monkeypatch.setattr(NotificationSender, "_send", fake_send)
    return sent


@pytest.fixture(name="client")
def client_fixture(engine, outbox):
    """Create a test client with disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True


@pytest.fixture(name="use_session")
def use_session_fixture(client: TestClient):
    """Make the client present exactly the given session cookie, or none."""

    def _use_session(session_id: str | None) -> None:
        client.cookies.clear()
        if session_id:
            client.cookies.set(SESSION_COOKIE, session_id)

    return _use_session


@pytest.fixture(name="make_user")
def make_user_fixture(client: TestClient):
    """Factory that signs up a user through the API and returns its details and session id."""

    def _make_user(
        email: str = "test@example.com",
        password: str = "password123",
        name: str = "Test User",
        role: str = ROLE_USER,
    ) -> dict:
        client.cookies.clear()
        response = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201, response.text
        user_id = response.json()["user"]["id"]
        if role != ROLE_USER:
            db = database.SessionLocal()
            try:
                db.query(User).filter(User.id == user_id).update({User.role: role})
                db.commit()
            finally:
                db.close()
        return {
            "id": user_id,
            "email": email,
            "password": password,
            "name": name,
            "session": response.cookies[SESSION_COOKIE],
        }

    return _make_user


@pytest.fixture(name="test_user")
def test_user_fixture(make_user) -> dict:
    """Create a signed-up regular user."""
    return make_user()


@pytest.fixture(name="admin_user")
def admin_user_fixture(make_user) -> dict:
    """Create a signed-up admin user."""
    return make_user("admin@example.com", "adminpass123", "Admin", role="admin")


@pytest.fixture(name="add_order")
def add_order_fixture(db_session: Session):
    """Factory that inserts an order the way the checkout integration would."""

    def _add_order(stripe_session_id: str, **fields) -> Order:
        order = Order(stripe_session_id=stripe_session_id, amount_cents=fields.pop("amount_cents", 2500), **fields)
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _add_order
