"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    CurrentUser,
    clear_session_cookie,
    get_session_id,
    require_auth,
    set_session_cookie,
)
from app.rate_limit import api_limit, auth_limit
from app.schemas.auth import (
    DeleteAccountRequest,
    ForgotPasswordRequest,
    LoginRequest,
    OkResponse,
    OrderListResponse,
    OrderResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserEnvelope,
    UserResponse,
    VerifyEmailRequest,
)
from app.services.auth import get_auth_service
from app.services.orders import get_order_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/signup", response_model=UserEnvelope, status_code=201)
@auth_limit
@api_limit
def signup(request: Request, response: Response, body: SignupRequest, db: Session = Depends(get_db)) -> UserEnvelope:
    """Create an account and sign it in."""
    user, session_id = get_auth_service().signup(db, body.email, body.password, body.name)
    set_session_cookie(response, session_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
@auth_limit
@api_limit
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> UserEnvelope:
    """Sign in with email and password."""
    user, session_id = get_auth_service().login(db, body.email, body.password)
    set_session_cookie(response, session_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=OkResponse)
@api_limit
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> OkResponse:
    """End the current session. Succeeds even without one."""
    get_auth_service().logout(db, get_session_id(request))
    clear_session_cookie(response)
    return OkResponse()


@router.get("/me", response_model=UserEnvelope)
@api_limit
def me(request: Request, user: CurrentUser = Depends(require_auth)) -> UserEnvelope:
    """Return the signed-in user's profile."""
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.get("/orders", response_model=OrderListResponse)
@api_limit
def list_orders(request: Request, user: CurrentUser = Depends(require_auth), db: Session = Depends(get_db)) -> OrderListResponse:
    """Order history for the signed-in user."""
    orders = get_order_service().get_user_orders(db, user.id, user.email)
    return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


@router.post("/forgot-password", response_model=OkResponse)
@auth_limit
@api_limit
def forgot_password(request: Request, body: ForgotPasswordRequest, db: Session = Depends(get_db)) -> OkResponse:
    """Request a password reset link. The response never reveals whether the email exists."""
    get_auth_service().forgot_password(db, body.email)
    return OkResponse()


@router.post("/reset-password", response_model=OkResponse)
@auth_limit
@api_limit
def reset_password(request: Request, body: ResetPasswordRequest, db: Session = Depends(get_db)) -> OkResponse:
    """Set a new password using a reset token. All existing sessions are signed out."""
    get_auth_service().reset_password(db, body.token, body.password)
    return OkResponse()


@router.post("/send-verification", response_model=OkResponse)
@api_limit
def send_verification(request: Request, user: CurrentUser = Depends(require_auth), db: Session = Depends(get_db)) -> OkResponse:
    """Send a new email verification link."""
    get_auth_service().send_verification(db, user.id)
    return OkResponse()


@router.post("/verify-email", response_model=OkResponse)
@api_limit
def verify_email(request: Request, body: VerifyEmailRequest, db: Session = Depends(get_db)) -> OkResponse:
    """Confirm email ownership with a verification token."""
    get_auth_service().verify_email(db, body.token)
    return OkResponse()


@router.delete("/account", response_model=OkResponse)
@api_limit
def delete_account(
    request: Request,
    response: Response,
    body: DeleteAccountRequest,
    user: CurrentUser = Depends(require_auth),
    db: Session = Depends(get_db),
) -> OkResponse:
    """Permanently delete the signed-in account. Requires the current password."""
    get_auth_service().delete_account(db, user.id, body.password)
    clear_session_cookie(response)
    return OkResponse()
