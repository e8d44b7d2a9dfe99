"""Request identity and authorization dependencies for FastAPI routes."""

import logging
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from app import database
from app.config import get_settings
from app.exceptions import ForbiddenError, UnauthorizedError
from app.models.user import ROLE_ADMIN, User
from app.services.sessions import get_session_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Public profile of the user behind the request's session."""

    id: int
    email: str
    name: str
    role: str
    plan: str | None
    stripe_customer_id: str | None
    email_verified: bool
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            plan=user.plan,
            stripe_customer_id=user.stripe_customer_id,
            email_verified=bool(user.email_verified),
            created_at=user.created_at,
        )


# Set once per request by SessionAuthMiddleware; None means anonymous.
_current_user: ContextVar[CurrentUser | None] = ContextVar("current_user", default=None)


def resolve_session(session_id: str | None) -> CurrentUser | None:
    """Look up a session id in the store. Any failure counts as anonymous."""
    if not session_id:
        return None
    db = database.SessionLocal()
    try:
        user = get_session_store().get_session_user(db, session_id)
        return CurrentUser.from_user(user) if user else None
    except SQLAlchemyError:
        logger.exception("Session lookup failed")
        return None
    finally:
        db.close()


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Resolve the session cookie to an identity before any route runs.

    Read-only: the session's expiry is never extended.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        session_id = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
        user = await run_in_threadpool(resolve_session, session_id) if session_id else None
        token = _current_user.set(user)
        try:
            return await call_next(request)
        finally:
            _current_user.reset(token)


async def get_current_user() -> CurrentUser | None:
    """Identity resolved for this request, or None when anonymous."""
    return _current_user.get()


async def require_auth(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """Require a signed-in user. Raises 401 otherwise."""
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


async def require_admin(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """Require a signed-in admin. Raises 403 otherwise, including for anonymous callers."""
    if user is None or not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


def get_session_id(request: Request) -> str | None:
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, session_id: str) -> None:
    """Set the session cookie with the same lifetime as the server-side session."""
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=settings.session_max_age_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
