"""Admin API endpoints. Every route requires the admin role."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, require_admin
from app.rate_limit import api_limit
from app.schemas.admin import AdminUserListResponse, AdminUserResponse, RoleUpdateRequest, StatsResponse
from app.schemas.auth import OkResponse
from app.services.admin import get_admin_service

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsResponse)
@api_limit
def get_stats(request: Request, db: Session = Depends(get_db)) -> StatsResponse:
    """Account and session counts, daily signups for the last 30 days and users per plan."""
    return StatsResponse(**get_admin_service().get_stats(db))


@router.get("/users", response_model=AdminUserListResponse)
@api_limit
def list_users(
    request: Request,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
    db: Session = Depends(get_db),
) -> AdminUserListResponse:
    """List users with optional search on email or name."""
    users, total, page, limit = get_admin_service().list_users(db, search=search, page=page, limit=limit)
    return AdminUserListResponse(
        users=[AdminUserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        limit=limit,
    )


@router.patch("/users/{user_id}/role", response_model=OkResponse)
@api_limit
def update_role(request: Request, user_id: int, body: RoleUpdateRequest, db: Session = Depends(get_db)) -> OkResponse:
    """Promote or demote a user."""
    get_admin_service().set_role(db, user_id, body.role)
    return OkResponse()


@router.delete("/users/{user_id}", response_model=OkResponse)
@api_limit
def delete_user(
    request: Request,
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> OkResponse:
    """Delete another user's account."""
    get_admin_service().delete_user(db, admin.id, user_id)
    return OkResponse()
