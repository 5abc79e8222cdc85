from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging
import traceback
import uuid

from pollgate.core.constants import ErrorCodes, ErrorMessages
from pollgate.core.errors import GateError, UpstreamFailure

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())[:8]


def _envelope(request: Request, request_id: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": str(request.url.path),
        "request_id": request_id
    }


async def gate_exception_handler(request: Request, exc: GateError):
    """
    Render request gate, auth and store failures.

    The body carries both the user-facing message and a stable error code.
    """
    request_id = _request_id(request)

    if isinstance(exc, UpstreamFailure):
        logger.error(
            f"Upstream failure [ID: {request_id}] - "
            f"Path: {request.url.path} - "
            f"Detail: {exc.detail}"
        )
    else:
        logger.info(
            f"Request rejected [ID: {request_id}] - "
            f"Path: {request.url.path} - "
            f"Code: {exc.error_code}"
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), **_envelope(request, request_id)},
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: Exception):
    """Malformed request bodies and parameters (422)"""
    request_id = _request_id(request)
    client_ip = request.client.host if request.client else "unknown"

    logger.warning(
        f"Validation error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"IP: {client_ip} - "
        f"Errors: {len(exc.errors())}"
    )

    return JSONResponse(
        status_code=422,
        content={
            "message": ErrorMessages.VALIDATION_ERROR,
            "error_code": ErrorCodes.VALIDATION_ERROR,
            "errors": _jsonable_errors(exc.errors()),
            **_envelope(request, request_id)
        }
    )


def _jsonable_errors(errors):
    # pydantic may put exception instances in "ctx"
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        error.pop("url", None)
        cleaned.append(error)
    return cleaned


async def http_exception_handler(request: Request, exc: HTTPException):
    request_id = _request_id(request)
    client_ip = request.client.host if request.client else "unknown"

    if exc.status_code >= 500:
        logger.error(
            f"Server error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip} - "
            f"Detail: {exc.detail}"
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"Client error [ID: {request_id}] - "
            f"Status: {exc.status_code} - "
            f"Path: {request.url.path} - "
            f"IP: {client_ip}"
        )

    if isinstance(exc.detail, dict):
        response_content = {**exc.detail, **_envelope(request, request_id)}
    else:
        response_content = {
            "error": str(exc.detail),
            "message": str(exc.detail),
            "error_code": "HTTP_ERROR",
            **_envelope(request, request_id)
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=response_content,
        headers=getattr(exc, "headers", None)
    )


async def database_exception_handler(request: Request, exc: Exception):
    """Database errors that escaped the poll store"""
    request_id = _request_id(request)

    logger.error(
        f"Database error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__}"
    )

    return JSONResponse(
        status_code=500,
        content={
            "message": ErrorMessages.DATABASE_ERROR,
            "error_code": ErrorCodes.DATABASE_ERROR,
            "hint": "Please try again later or contact support",
            **_envelope(request, request_id)
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all for unexpected errors"""
    request_id = _request_id(request)
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    logger.critical(
        f"Unexpected error [ID: {request_id}] - "
        f"Path: {request.url.path} - "
        f"Error: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"Traceback: {tb_str}"
    )

    return JSONResponse(
        status_code=500,
        content={
            "message": ErrorMessages.INTERNAL_ERROR,
            "error_code": ErrorCodes.INTERNAL_ERROR,
            **_envelope(request, request_id)
        }
    )
