"""Order model, written by the checkout integration."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.database import Base


class Order(Base):
    """Completed checkout. Survives account deletion with its identity stripped."""

    __tablename__ = "customer_order"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String(256), nullable=True, index=True)
    stripe_customer_id = Column(String(256), nullable=True)
    stripe_session_id = Column(String(256), nullable=False, unique=True)
    amount_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(8), nullable=False, default="usd")
    status = Column(String(32), nullable=False, default="paid")
    plan_id = Column(String(64), nullable=True)
    item_summary = Column(String(512), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
