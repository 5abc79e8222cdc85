"""
Reusable OpenAPI response definitions for the endpoints.

Keeps the documented error shapes in one place so every router advertises the
same bodies for the same failures.
"""

from typing import Any, Dict

from pollgate.core.constants import ErrorCodes, ErrorMessages
from pollgate.schemas.error import GateErrorResponse, ServerErrorResponse, ValidationErrorResponse

CONTENT_TYPE_JSON = "application/json"
EXAMPLE_TIMESTAMP = "2024-01-01T12:00:00Z"
EXAMPLE_POLL_PATH = "/api/polls/1"


def _gate_error(description: str, message: str, error_code: str, path: str = EXAMPLE_POLL_PATH) -> Dict[str, Any]:
    return {
        "description": description,
        "model": GateErrorResponse,
        "content": {
            CONTENT_TYPE_JSON: {
                "example": {
                    "error": message,
                    "message": message,
                    "error_code": error_code,
                    "timestamp": EXAMPLE_TIMESTAMP,
                    "path": path
                }
            }
        }
    }


INVALID_TOKEN_RESPONSE = _gate_error(
    "Missing or invalid CSRF token", ErrorMessages.INVALID_CSRF_TOKEN, ErrorCodes.INVALID_CSRF_TOKEN
)
AUTH_ERROR_RESPONSE = _gate_error(
    "Authentication required", ErrorMessages.LOGIN_REQUIRED.format(action="continue"), ErrorCodes.AUTH_REQUIRED
)
NOT_FOUND_RESPONSE = _gate_error("Poll not found", ErrorMessages.POLL_NOT_FOUND, ErrorCodes.RESOURCE_NOT_FOUND)
ALREADY_VOTED_RESPONSE = _gate_error("Duplicate vote", ErrorMessages.ALREADY_VOTED, ErrorCodes.ALREADY_VOTED)
UPSTREAM_ERROR_RESPONSE = _gate_error(
    "Auth or poll store failure", ErrorMessages.DATABASE_ERROR, ErrorCodes.UPSTREAM_FAILURE
)
ADMIN_REQUIRED_RESPONSE = _gate_error(
    "Admin role required", ErrorMessages.ADMIN_REQUIRED, ErrorCodes.INSUFFICIENT_PERMISSIONS, "/api/admin/polls"
)


def get_forbidden_response(action: str) -> Dict[str, Any]:
    return _gate_error(
        "Not the poll owner and not an admin",
        ErrorMessages.NOT_AUTHORIZED.format(action=action),
        ErrorCodes.INSUFFICIENT_PERMISSIONS
    )


def get_business_validation_response(message: str) -> Dict[str, Any]:
    return _gate_error("Poll input rejected", message, ErrorCodes.VALIDATION_ERROR)


REQUEST_VALIDATION_RESPONSE = {
    "description": "Malformed request body",
    "model": ValidationErrorResponse,
}

SERVER_ERROR_RESPONSE = {
    "description": "Internal server error",
    "model": ServerErrorResponse,
}


def get_poll_create_responses() -> Dict[int, Dict[str, Any]]:
    return {
        400: get_business_validation_response(ErrorMessages.TOO_FEW_OPTIONS),
        401: AUTH_ERROR_RESPONSE,
        403: INVALID_TOKEN_RESPONSE,
        422: REQUEST_VALIDATION_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }


def get_poll_update_responses() -> Dict[int, Dict[str, Any]]:
    return {
        400: get_business_validation_response(ErrorMessages.DUPLICATE_OPTIONS),
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("update"),
        404: NOT_FOUND_RESPONSE,
        422: REQUEST_VALIDATION_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }


def get_poll_delete_responses() -> Dict[int, Dict[str, Any]]:
    return {
        401: AUTH_ERROR_RESPONSE,
        403: get_forbidden_response("delete"),
        404: NOT_FOUND_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }


def get_poll_vote_responses() -> Dict[int, Dict[str, Any]]:
    return {
        400: get_business_validation_response(ErrorMessages.INVALID_OPTION),
        401: AUTH_ERROR_RESPONSE,
        403: INVALID_TOKEN_RESPONSE,
        404: NOT_FOUND_RESPONSE,
        409: ALREADY_VOTED_RESPONSE,
        422: REQUEST_VALIDATION_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }


def get_poll_read_responses() -> Dict[int, Dict[str, Any]]:
    return {
        404: NOT_FOUND_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }


def get_auth_responses() -> Dict[int, Dict[str, Any]]:
    return {
        400: _gate_error(
            "Sign-up rejected", ErrorMessages.USER_ALREADY_REGISTERED, ErrorCodes.AUTH_FAILED, "/api/auth/register"
        ),
        401: _gate_error(
            "Sign-in rejected", ErrorMessages.INVALID_CREDENTIALS, ErrorCodes.AUTH_FAILED, "/api/auth/login"
        ),
        422: REQUEST_VALIDATION_RESPONSE,
        500: SERVER_ERROR_RESPONSE,
        502: UPSTREAM_ERROR_RESPONSE,
    }
