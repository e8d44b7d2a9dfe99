"""Authentication service.

The only writer of users, sessions and recovery tokens. Every flow validates
its input before touching the store, commits once, and hands any email to
``spawn_detached`` after the commit so delivery never affects the outcome.
"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import BadRequestError, ConflictError, UnauthorizedError
from app.models.user import ROLE_USER, User
from app.services.background import spawn_detached
from app.services.notifications import NotificationSender, get_notification_sender
from app.services.orders import get_order_service
from app.services.passwords import dummy_hash, hash_password, validate_strength, verify_password
from app.services.sessions import get_session_store
from app.services.tokens import get_token_store

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "An account with this email already exists"
INVALID_RESET_LINK = "Invalid or expired reset link"
INVALID_VERIFICATION_LINK = "Invalid or expired verification link"


class AuthService:
    """Handles signup, login, recovery, verification and account deletion."""

    def __init__(self, notifier: NotificationSender | None = None) -> None:
        self._notifier = notifier
        self.sessions = get_session_store()
        self.tokens = get_token_store()
        self.orders = get_order_service()

    @property
    def notifier(self) -> NotificationSender:
        return self._notifier or get_notification_sender()

    def _site_url(self) -> str:
        return get_settings().SITE_URL

    def get_user_by_email(self, db: Session, email: str) -> User | None:
        """Case-insensitive lookup."""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def signup(self, db: Session, email: str | None, password: str | None, name: str | None = None) -> tuple[User, str]:
        """Create an account and its first session. Returns (user, session_id)."""
        email = (email or "").strip()
        if not email or not password:
            raise BadRequestError("Email and password are required")

        error = validate_strength(password)
        if error:
            raise BadRequestError(error)

        if self.get_user_by_email(db, email):
            raise ConflictError(DUPLICATE_EMAIL)

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=(name or "").strip(),
            role=ROLE_USER,
            email_verified=False,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same address.
            db.rollback()
            raise ConflictError(DUPLICATE_EMAIL) from None

        session_id = self.sessions.create_session(db, user.id)
        verification = self.tokens.issue_verification_token(db, user.id)
        verify_url = f"{self._site_url()}/verify-email?token={verification.token}"
        db.commit()
        db.refresh(user)
        logger.info("Account %d created", user.id)

        spawn_detached(self.notifier.send_welcome, user.email, user.name)
        spawn_detached(self.notifier.send_email_verification, user.email, user.name, verify_url)
        return user, session_id

    def login(self, db: Session, email: str | None, password: str | None) -> tuple[User, str]:
        """Verify credentials and open a new session. Returns (user, session_id)."""
        if not email or not password:
            raise BadRequestError("Email and password are required")

        user = self.get_user_by_email(db, email)
        if user is None:
            verify_password(password, dummy_hash())
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        session_id = self.sessions.create_session(db, user.id)
        db.commit()
        db.refresh(user)
        return user, session_id

    def logout(self, db: Session, session_id: str | None) -> None:
        """End a session. Unknown or missing ids are ignored."""
        if not session_id:
            return
        self.sessions.delete_session(db, session_id)
        db.commit()

    def forgot_password(self, db: Session, email: str | None) -> None:
        """Email a reset link if the account exists.

        Returns the same way whether or not the email is registered, so callers
        cannot use it to discover accounts.
        """
        email = (email or "").strip()
        if not email:
            raise BadRequestError("Email is required")

        user = self.get_user_by_email(db, email)
        if user is None:
            return

        reset = self.tokens.issue_reset_token(db, user.id)
        reset_url = f"{self._site_url()}/reset-password?token={reset.token}"
        to, name = user.email, user.name
        db.commit()
        logger.info("Password reset issued for account %d", user.id)

        spawn_detached(self.notifier.send_password_reset, to, name, reset_url)

    def reset_password(self, db: Session, token: str | None, password: str | None) -> None:
        """Set a new password with a reset token and sign the user out everywhere."""
        if not token or not password:
            raise BadRequestError("Token and password are required")

        error = validate_strength(password)
        if error:
            raise BadRequestError(error)

        password_hash = hash_password(password)
        user_id = self.tokens.consume_reset_token(db, token)
        if user_id is None:
            db.rollback()
            raise BadRequestError(INVALID_RESET_LINK)

        db.query(User).filter(User.id == user_id).update(
            {User.password_hash: password_hash, User.updated_at: datetime.utcnow()},
            synchronize_session=False,
        )
        removed = self.sessions.delete_user_sessions(db, user_id)
        db.commit()
        logger.info("Password reset for account %d, %d sessions revoked", user_id, removed)

    def send_verification(self, db: Session, user_id: int) -> None:
        """Issue a fresh verification link, unless the email is already verified."""
        user = db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("Authentication required")
        if user.email_verified:
            return

        verification = self.tokens.issue_verification_token(db, user.id)
        verify_url = f"{self._site_url()}/verify-email?token={verification.token}"
        to, name = user.email, user.name
        db.commit()

        spawn_detached(self.notifier.send_email_verification, to, name, verify_url)

    def verify_email(self, db: Session, token: str | None) -> None:
        """Mark the token owner's email as verified and consume all their verification tokens."""
        if not token:
            raise BadRequestError("Token is required")

        verification = self.tokens.find_verification_token(db, token)
        if verification is None:
            raise BadRequestError(INVALID_VERIFICATION_LINK)

        user_id = verification.user_id
        db.query(User).filter(User.id == user_id).update(
            {User.email_verified: True, User.updated_at: datetime.utcnow()},
            synchronize_session=False,
        )
        self.tokens.delete_verification_tokens(db, user_id)
        db.commit()
        logger.info("Email verified for account %d", user_id)

    def delete_account(self, db: Session, user_id: int, password: str | None) -> None:
        """Permanently delete the caller's account after re-checking their password."""
        if not password:
            raise BadRequestError("Password is required")

        user = db.get(User, user_id)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Incorrect password")

        self.remove_user(db, user)

    def remove_user(self, db: Session, user: User) -> None:
        """Strip the user's identity from their orders, then delete the user.

        Sessions and tokens go with the user row through ON DELETE CASCADE.
        """
        user_id = user.id
        anonymized = self.orders.anonymize_user_orders(db, user.id, user.email)
        db.delete(user)
        db.commit()
        logger.info("Account %d deleted, %d orders anonymized", user_id, anonymized)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
