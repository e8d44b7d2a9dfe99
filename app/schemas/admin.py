"""Pydantic schemas for admin user management."""

from datetime import date as Date
from datetime import datetime

from pydantic import BaseModel


class AdminUserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: str
    plan: str | None = None
    email_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total: int
    page: int
    limit: int


class RoleUpdateRequest(BaseModel):
    role: str | None = None


class DailySignups(BaseModel):
    date: Date
    count: int


class PlanCount(BaseModel):
    plan: str
    count: int


class StatsResponse(BaseModel):
    users: int
    admins: int
    verified_users: int
    active_sessions: int
    signups_by_day: list[DailySignups]
    users_by_plan: list[PlanCount]
