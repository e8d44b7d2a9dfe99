"""Admin user management service."""

from datetime import datetime, timedelta

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.exceptions import BadRequestError, NotFoundError
from app.models.user import ROLE_ADMIN, ROLES, User
from app.services.auth import get_auth_service
from app.services.sessions import get_session_store

PLAN_FREE = "free"


class AdminService:
    """User listing, role changes and removal on behalf of an admin."""

    def get_stats(self, db: Session) -> dict:
        """Account counts for the dashboard."""
        return {
            "users": db.query(func.count(User.id)).scalar() or 0,
            "admins": db.query(func.count(User.id)).filter(User.role == ROLE_ADMIN).scalar() or 0,
            "verified_users": db.query(func.count(User.id)).filter(User.email_verified.is_(True)).scalar() or 0,
            "active_sessions": get_session_store().count_active(db),
            "signups_by_day": self.signups_by_day(db),
            "users_by_plan": self.users_by_plan(db),
        }

    def signups_by_day(self, db: Session, days: int = 30) -> list[dict]:
        """New accounts per calendar day (UTC) over the last ``days`` days, oldest first."""
        since = datetime.utcnow() - timedelta(days=days)
        day = func.date(User.created_at)
        rows = (
            db.query(day.label("date"), func.count(User.id).label("count"))
            .filter(User.created_at > since)
            .group_by(day)
            .order_by(day)
            .all()
        )
        return [{"date": row.date, "count": row.count} for row in rows]

    def users_by_plan(self, db: Session) -> list[dict]:
        """Account count per plan. Users without a plan count as free."""
        counts: dict[str, int] = {}
        for plan, count in db.query(User.plan, func.count(User.id)).group_by(User.plan).all():
            key = plan or PLAN_FREE
            counts[key] = counts.get(key, 0) + count
        return [{"plan": plan, "count": count} for plan, count in sorted(counts.items())]

    def list_users(
        self, db: Session, search: str | None = None, page: int = 1, limit: int = 50
    ) -> tuple[list[User], int, int, int]:
        """Page through users, newest first. Returns (users, total, page, limit) with clamped paging."""
        page = max(1, page)
        limit = min(100, max(1, limit))

        query = db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.email.ilike(pattern), User.name.ilike(pattern)))

        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return users, total, page, limit

    def set_role(self, db: Session, user_id: int, role: str | None) -> User:
        if role not in ROLES:
            raise BadRequestError("Invalid role")
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.role = role
        db.commit()
        db.refresh(user)
        return user

    def delete_user(self, db: Session, actor_id: int, user_id: int) -> None:
        """Delete another user's account. Admins cannot delete themselves here."""
        if actor_id == user_id:
            raise BadRequestError("Cannot delete your own account")
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        get_auth_service().remove_user(db, user)


_admin_service: AdminService | None = None


def get_admin_service() -> AdminService:
    """Get singleton admin service instance."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service
