"""
Application Constants

Centralized location for all application constants, organized by domain.
This makes it easy to maintain and update values across the entire application.
"""

from enum import Enum

# =============================================================================
# API Configuration
# =============================================================================

class APIConfig:
    """API-level configuration constants"""

    API_PREFIX = "/api"
    API_VERSION = "1.0.0"
    API_TITLE = "Pollgate API"
    API_DESCRIPTION = """
    A polling API: register, sign in, create polls, vote once per poll and view results.

    ## Security
    - Every state-changing poll request must carry a CSRF token issued by `GET /api/csrf`
    - Poll updates and deletions are limited to the owner or an admin
    - One vote per user per poll, enforced by the database
    """

    # CORS Configuration
    ALLOWED_ORIGINS = [
        "http://localhost:3000",  # React / Next dev server
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]


# =============================================================================
# Authentication & Security
# =============================================================================

class Role(str, Enum):
    """Roles a user can hold. Only ADMIN carries extra privileges."""
    USER = "user"
    ADMIN = "admin"


class AuthConfig:
    """Authentication and session constants"""

    # JWT Configuration
    ACCESS_TOKEN_EXPIRE_MINUTES = 60
    ALGORITHM = "HS256"
    TOKEN_TYPE = "bearer"

    # Session cookie, read when no Authorization header is sent
    SESSION_COOKIE_NAME = "access_token"

    # Password requirements
    MIN_PASSWORD_LENGTH = 8
    MAX_PASSWORD_LENGTH = 128
    BCRYPT_ROUNDS = 12
    BCRYPT_MAX_BYTES = 72


class CSRFConfig:
    """CSRF token constants shared by the issuer and the validator"""

    COOKIE_NAME = "csrf_token"
    HEADER_NAME = "X-CSRF-Token"
    FORM_FIELD = "csrf_token"
    TOKEN_BYTES = 32  # 256 bits
    TOKEN_EXPIRY_SECONDS = 24 * 60 * 60
    SAME_SITE = "lax"
    COOKIE_PATH = "/"
    SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


class SecurityHeaders:
    """Headers attached to every response"""

    DEFAULTS = {
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
        "Content-Security-Policy": (
            "default-src 'self'; img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline'; connect-src 'self' https:;"
        ),
    }
    REQUEST_ID_HEADER = "X-Request-Id"


# =============================================================================
# Business Logic Limits
# =============================================================================

class BusinessLimits:
    """Business rules and validation constants"""

    MAX_QUESTION_LENGTH = 500
    MIN_POLL_OPTIONS = 2
    MAX_POLL_OPTIONS = 10
    MAX_OPTION_LENGTH = 200


# =============================================================================
# Error Messages
# =============================================================================

class ErrorMessages:
    """Standardized error messages shown to the user"""

    # Token errors
    INVALID_CSRF_TOKEN = "Invalid security token. Please refresh the page and try again."

    # Authentication errors
    LOGIN_REQUIRED = "You must be logged in to {action}."
    INVALID_CREDENTIALS = "Invalid login credentials"
    USER_ALREADY_REGISTERED = "User already registered"
    PASSWORD_TOO_SHORT = f"Password should be at least {AuthConfig.MIN_PASSWORD_LENGTH} characters."
    PASSWORD_TOO_LONG = f"Password should be at most {AuthConfig.MAX_PASSWORD_LENGTH} characters."

    # Authorization errors
    NOT_AUTHORIZED = "You don't have permission to {action} this poll."
    ADMIN_REQUIRED = "Administrator privileges are required."

    # Resource errors
    POLL_NOT_FOUND = "Poll not found."

    # Validation errors, in the order they are checked
    QUESTION_REQUIRED = "Please provide a valid question."
    QUESTION_TOO_LONG = f"Question is too long. Maximum {BusinessLimits.MAX_QUESTION_LENGTH} characters allowed."
    TOO_FEW_OPTIONS = "Please provide at least two options."
    TOO_MANY_OPTIONS = f"Maximum {BusinessLimits.MAX_POLL_OPTIONS} options allowed."
    EMPTY_OPTION = "Empty options are not allowed."
    OPTION_TOO_LONG = f"Option text is too long. Maximum {BusinessLimits.MAX_OPTION_LENGTH} characters allowed."
    DUPLICATE_OPTIONS = "Duplicate options are not allowed."
    INVALID_OPTION = "Invalid option selected."

    # Business rule violations
    ALREADY_VOTED = "You have already voted on this poll."

    # System errors
    DATABASE_ERROR = "Database operation failed"
    INTERNAL_ERROR = "An unexpected error occurred"
    VALIDATION_ERROR = "Validation failed"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes for API responses"""

    INVALID_CSRF_TOKEN = "INVALID_CSRF_TOKEN"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_FAILED = "AUTH_FAILED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ALREADY_VOTED = "ALREADY_VOTED"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Logging Configuration
# =============================================================================

class LoggingConfig:
    """Logging configuration constants"""

    DEFAULT_LOG_LEVEL = "INFO"
    DATABASE_LOG_LEVEL = "WARNING"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# Environment-Specific Constants
# =============================================================================

class EnvironmentConfig:
    """Environment-specific configuration"""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    DEFAULT_ENVIRONMENT = DEVELOPMENT
    DEFAULT_DATABASE_URL = "sqlite:///./polls.db"

    # Cookies are only marked Secure here
    SECURE_COOKIE_ENVIRONMENTS = [PRODUCTION]


# =============================================================================
# Convenience Exports
# =============================================================================

API_PREFIX = APIConfig.API_PREFIX
CSRF_COOKIE_NAME = CSRFConfig.COOKIE_NAME
CSRF_HEADER_NAME = CSRFConfig.HEADER_NAME
CSRF_FORM_FIELD = CSRFConfig.FORM_FIELD
