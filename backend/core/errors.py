# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Domain error taxonomy for the auth core.

Every error carries a stable ``code`` / ``status_code`` pair.  The FastAPI
exception handler registered in main.py renders them as

    {"error": <code>, "detail": <message>}

Storage-layer exceptions are never rendered directly; the service maps
them onto :class:`StorageError` (or :class:`PartialRevocationError`) and
the original exception is only logged.
"""

from typing import Any, Dict, Optional

from fastapi import status


class AuthError(Exception):
    """Base class – subclasses override code, status_code and message."""

    code = "auth_error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Authentication error"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class ValidationError(AuthError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class UsernameTaken(AuthError):
    code = "username_taken"
    status_code = status.HTTP_409_CONFLICT
    message = "Username already exists"


class InvalidCredentials(AuthError):
    # Same message for "no such user" and "wrong password"
    code = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid username or password"


class UserNotFound(AuthError):
    code = "user_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class InvalidSecurityAnswer(AuthError):
    code = "invalid_security_answer"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect security answer"


class InvalidSession(AuthError):
    code = "invalid_session"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired session"


class StorageError(AuthError):
    code = "storage_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Storage operation failed"


class PartialRevocationError(AuthError):
    """
    The password was changed but not every session of the user could be
    deleted.  ``deleted`` / ``remaining`` describe the outcome; ``remaining``
    is None when the delete call itself failed and the count is unknown.
    """

    code = "partial_revocation"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Password was changed but some sessions could not be revoked"

    def __init__(self, deleted: int = 0, remaining: Optional[int] = None):
        super().__init__(deleted=deleted, remaining=remaining)
        self.deleted = deleted
        self.remaining = remaining
