"""Token store for password reset and email verification links.

Reset tokens carry a ``used`` flag and are never deleted, so past requests stay
visible. Verification tokens have no flag: consuming one deletes it.
"""

import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.token import EmailVerification, PasswordReset


class TokenStore:
    """Issues and consumes single-use recovery and verification tokens."""

    def issue_reset_token(self, db: Session, user_id: int) -> PasswordReset:
        """Retire any unused reset tokens for the user and add a fresh one. Caller commits."""
        settings = get_settings()
        db.query(PasswordReset).filter(
            PasswordReset.user_id == user_id,
            PasswordReset.used.is_(False),
        ).update({PasswordReset.used: True}, synchronize_session=False)

        reset = PasswordReset(
            user_id=user_id,
            token=secrets.token_urlsafe(32),
            expires_at=datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
            used=False,
        )
        db.add(reset)
        return reset

    def consume_reset_token(self, db: Session, token: str) -> int | None:
        """Mark a usable reset token as used and return its user id.

        The check and the write are one conditional UPDATE, so when the same
        token is submitted twice concurrently only one caller gets a user id.
        Caller commits.
        """
        claimed = (
            db.query(PasswordReset)
            .filter(
                PasswordReset.token == token,
                PasswordReset.used.is_(False),
                PasswordReset.expires_at > datetime.utcnow(),
            )
            .update({PasswordReset.used: True}, synchronize_session=False)
        )
        if claimed != 1:
            return None
        return db.query(PasswordReset.user_id).filter(PasswordReset.token == token).scalar()

    def issue_verification_token(self, db: Session, user_id: int) -> EmailVerification:
        """Replace all verification tokens of the user with a fresh one. Caller commits."""
        settings = get_settings()
        self.delete_verification_tokens(db, user_id)
        verification = EmailVerification(
            user_id=user_id,
            token=secrets.token_urlsafe(32),
            expires_at=datetime.utcnow() + timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
        )
        db.add(verification)
        return verification

    def find_verification_token(self, db: Session, token: str) -> EmailVerification | None:
        return (
            db.query(EmailVerification)
            .filter(EmailVerification.token == token, EmailVerification.expires_at > datetime.utcnow())
            .first()
        )

    def delete_verification_tokens(self, db: Session, user_id: int) -> int:
        return (
            db.query(EmailVerification)
            .filter(EmailVerification.user_id == user_id)
            .delete(synchronize_session=False)
        )


_token_store: TokenStore | None = None


def get_token_store() -> TokenStore:
    """Get singleton token store instance."""
    global _token_store
    if _token_store is None:
        _token_store = TokenStore()
    return _token_store
