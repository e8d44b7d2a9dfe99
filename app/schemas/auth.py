"""Pydantic schemas for authentication endpoints.

Request fields are optional so that missing values reach the service and are
reported as 400 with a readable message.
"""

from datetime import datetime

from pydantic import BaseModel


class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str | None = None
    password: str | None = None


class VerifyEmailRequest(BaseModel):
    token: str | None = None


class DeleteAccountRequest(BaseModel):
    password: str | None = None


class UserResponse(BaseModel):
    """Public profile. Never includes the password hash."""

    id: int
    email: str
    name: str
    role: str
    plan: str | None = None
    stripe_customer_id: str | None = None
    email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserEnvelope(BaseModel):
    user: UserResponse


class OkResponse(BaseModel):
    ok: bool = True


class OrderResponse(BaseModel):
    id: int
    stripe_session_id: str
    amount_cents: int
    currency: str
    status: str
    plan_id: str | None = None
    item_summary: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
