# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – register, login, password reset, logout, current session.

The handlers are thin: they translate between the wire schemas and
:class:`auth.service.AuthService`.  Domain errors raised by the service are
rendered by the exception handler registered in main.py.
"""

from fastapi import APIRouter, Depends, Request

from auth.dependencies import get_auth_service, get_current_session
from auth.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionInfoResponse,
    UserPublic,
)
from auth.service import AuthenticatedSession, AuthResult, AuthService
from core.logger import logger
from core.security import get_client_ip

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserPublic.model_validate(result.user),
        token=result.token,
        expires_at=result.expires_at,
    )


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create an account and open its first session."""
    result = service.register(
        username=body.username,
        password=body.password,
        security_question=body.security_question,
        security_answer=body.security_answer,
    )
    return _auth_response(result)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Authenticate and return a signed session token."""
    result = service.login(username=body.username, password=body.password)
    logger.info("Login | user_id=%s client=%s", result.user.id, get_client_ip(request))
    return _auth_response(result)


# ---------------------------------------------------------------------------
# POST /auth/reset-password
# ---------------------------------------------------------------------------


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Replace the password after checking the security answer.  Every
    existing session is revoked; the user must log in again.
    """
    service.reset_password(
        username=body.username,
        security_answer=body.security_answer,
        new_password=body.new_password,
    )
    return MessageResponse(message="Password reset successfully")


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
def logout(
    current: AuthenticatedSession = Depends(get_current_session),
    service: AuthService = Depends(get_auth_service),
):
    """Revoke the presented token only; other sessions stay valid."""
    service.logout(current.token)
    return MessageResponse(message="Logged out")


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=SessionInfoResponse)
def me(current: AuthenticatedSession = Depends(get_current_session)):
    """Return the authenticated user's public profile (no secrets)."""
    return SessionInfoResponse(
        user=UserPublic.model_validate(current.user),
        expires_at=current.expires_at,
    )
