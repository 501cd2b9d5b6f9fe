# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI dependency wiring for the auth service.

The stores are built over the request's DB session; the hasher and token
issuer are the process-wide instances from core.security.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from auth.service import AuthenticatedSession, AuthService
from core.security import oauth2_scheme, password_hasher, token_issuer
from database import get_db
from stores.credential_store import SqlCredentialStore
from stores.session_store import SqlSessionStore


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(
        credentials=SqlCredentialStore(db),
        sessions=SqlSessionStore(db),
        hasher=password_hasher,
        tokens=token_issuer,
    )


def get_current_session(
    token: str = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service),
) -> AuthenticatedSession:
    """
    Dependency: the caller's live session.  Raises InvalidSession (401) if
    the token is forged, expired, revoked or belongs to a vanished user.
    """
    return service.authenticate(token)
