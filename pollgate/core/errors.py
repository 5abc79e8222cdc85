"""
Domain errors raised by the request gate, the auth service and the poll store.

Every failure is a subclass of ``GateError`` so callers can branch on the
error kind (``isinstance`` or ``error_code``) instead of parsing the message.
The message is still human readable and is shown to the user verbatim.
"""

from typing import Any, Dict, Optional

from fastapi import status

from pollgate.core.constants import ErrorCodes, ErrorMessages


class GateError(Exception):
    """Base class for request-scoped failures returned to the caller"""

    error_code: str = ErrorCodes.INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "message": self.message,
            "error_code": self.error_code,
        }


class InvalidToken(GateError):
    """Missing or mismatched CSRF token. Recoverable by fetching a fresh token."""

    error_code = ErrorCodes.INVALID_CSRF_TOKEN
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = ErrorMessages.INVALID_CSRF_TOKEN):
        super().__init__(message)


class Unauthenticated(GateError):
    error_code = ErrorCodes.AUTH_REQUIRED
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, action: str = "continue"):
        super().__init__(ErrorMessages.LOGIN_REQUIRED.format(action=action))


class Forbidden(GateError):
    error_code = ErrorCodes.INSUFFICIENT_PERMISSIONS
    status_code = status.HTTP_403_FORBIDDEN


class ValidationFailed(GateError):
    error_code = ErrorCodes.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFound(GateError):
    error_code = ErrorCodes.RESOURCE_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = ErrorMessages.POLL_NOT_FOUND):
        super().__init__(message)


class AlreadyVoted(GateError):
    error_code = ErrorCodes.ALREADY_VOTED
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = ErrorMessages.ALREADY_VOTED):
        super().__init__(message)


class AuthFailure(GateError):
    """Sign-up / sign-in rejected by the auth service. Message is surfaced as-is."""

    error_code = ErrorCodes.AUTH_FAILED
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class UpstreamFailure(GateError):
    """The auth or poll store failed. Terminal for the current request."""

    error_code = ErrorCodes.UPSTREAM_FAILURE
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str, message: str = ErrorMessages.DATABASE_ERROR):
        super().__init__(message)
        self.detail = detail
