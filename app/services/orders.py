"""Order history lookups and anonymization for account deletion."""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models.order import Order


def _owned_by(user_id: int, email: str):
    return or_(Order.user_id == user_id, func.lower(Order.email) == email.lower())


class OrderService:
    """Read access to orders written by the checkout integration."""

    def get_user_orders(self, db: Session, user_id: int, email: str, limit: int = 50) -> list[Order]:
        """Orders placed by the user's id or email, newest first."""
        return (
            db.query(Order)
            .filter(_owned_by(user_id, email))
            .order_by(Order.created_at.desc())
            .limit(limit)
            .all()
        )

    def anonymize_user_orders(self, db: Session, user_id: int, email: str) -> int:
        """Detach orders from a user that is about to be deleted. Caller commits."""
        return (
            db.query(Order)
            .filter(_owned_by(user_id, email))
            .update(
                {Order.user_id: None, Order.email: None, Order.stripe_customer_id: None},
                synchronize_session=False,
            )
        )


_order_service: OrderService | None = None


def get_order_service() -> OrderService:
    """Get singleton order service instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
