from pydantic import BaseModel
from typing import Optional, Any, Dict, List


class ErrorDetail(BaseModel):
    """Individual error detail for validation errors"""
    loc: List[Any]  # Location of the error (field path)
    msg: str        # Error message
    type: str       # Error type
    ctx: Optional[Dict[str, Any]] = None  # Additional context


class ValidationErrorResponse(BaseModel):
    """Response schema for malformed request bodies (422)"""
    message: str = "Validation failed"
    error_code: str = "VALIDATION_ERROR"
    errors: List[ErrorDetail]
    timestamp: str
    path: str
    request_id: Optional[str] = None


class GateErrorResponse(BaseModel):
    """Response schema for every gate failure (400, 401, 403, 404, 409, 502)"""
    error: str
    message: str
    error_code: str
    timestamp: str
    path: str
    request_id: Optional[str] = None


class ServerErrorResponse(BaseModel):
    """Response schema for internal server errors (500)"""
    message: str = "Internal server error"
    error_code: str = "INTERNAL_ERROR"
    request_id: Optional[str] = None
    timestamp: str
    path: str
