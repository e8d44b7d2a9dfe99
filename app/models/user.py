"""User model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, func
from sqlalchemy.orm import relationship

from app.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    """Storefront customer or administrator."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(256), nullable=False)
    password_hash = Column(String(256), nullable=False)
    name = Column(String(256), nullable=False, default="")
    role = Column(String(16), nullable=False, default=ROLE_USER)  # user, admin
    plan = Column(String(64), nullable=True)
    stripe_customer_id = Column(String(256), nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    sessions = relationship("UserSession", cascade="all, delete-orphan", passive_deletes=True)
    password_resets = relationship("PasswordReset", cascade="all, delete-orphan", passive_deletes=True)
    email_verifications = relationship("EmailVerification", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# Emails are stored as entered but unique regardless of case.
Index("uq_user_email_lower", func.lower(User.email), unique=True)
