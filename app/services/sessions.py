"""Session store: opaque bearer tokens with an absolute expiry."""

import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.session import UserSession
from app.models.user import User


class SessionStore:
    """Creates, resolves and removes login sessions."""

    def create_session(self, db: Session, user_id: int) -> str:
        """Add a new session for the user and return its id. Caller commits."""
        settings = get_settings()
        session_id = secrets.token_hex(32)
        db.add(
            UserSession(
                id=session_id,
                user_id=user_id,
                expires_at=datetime.utcnow() + timedelta(days=settings.SESSION_MAX_AGE_DAYS),
            )
        )
        return session_id

    def get_session_user(self, db: Session, session_id: str | None) -> User | None:
        """Resolve a session id to its user. Expired sessions resolve to None."""
        if not session_id:
            return None
        return (
            db.query(User)
            .join(UserSession, UserSession.user_id == User.id)
            .filter(UserSession.id == session_id, UserSession.expires_at > datetime.utcnow())
            .first()
        )

    def delete_session(self, db: Session, session_id: str) -> int:
        return db.query(UserSession).filter(UserSession.id == session_id).delete(synchronize_session=False)

    def delete_user_sessions(self, db: Session, user_id: int) -> int:
        """Remove every session of a user, forcing re-login everywhere."""
        return db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)

    def sweep_expired(self, db: Session) -> int:
        """Delete expired sessions and commit. Returns the number of rows removed."""
        removed = (
            db.query(UserSession)
            .filter(UserSession.expires_at <= datetime.utcnow())
            .delete(synchronize_session=False)
        )
        db.commit()
        return removed

    def count_active(self, db: Session) -> int:
        return db.query(UserSession).filter(UserSession.expires_at > datetime.utcnow()).count()


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get singleton session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
