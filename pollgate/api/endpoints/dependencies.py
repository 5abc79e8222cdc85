from fastapi import Depends, Header, Request, Response
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from pollgate.db.database import get_db
from pollgate.core.constants import API_PREFIX, AuthConfig, CSRF_HEADER_NAME
from pollgate.core.csrf import CookieTokenStore, CSRFTokenService
from pollgate.core.security import use_secure_cookies
from pollgate.schemas.user import Identity
from pollgate.services.auth import AuthService
from pollgate.services.polls import PollService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/token", auto_error=False)


def get_access_token(request: Request, bearer_token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Session token from the Authorization header, falling back to the session cookie"""
    return bearer_token or request.cookies.get(AuthConfig.SESSION_COOKIE_NAME)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_current_identity_optional(
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service)
) -> Optional[Identity]:
    """Resolve the caller without failing.

    Mutating endpoints use this so the CSRF check can run before the login
    check; the service decides when a missing identity is an error.
    """
    return auth.get_user(access_token)


def get_csrf_service(request: Request, response: Response) -> CSRFTokenService:
    return CSRFTokenService(CookieTokenStore(request, response), secure=use_secure_cookies())


def get_header_csrf_token(
    csrf_header: Optional[str] = Header(None, alias=CSRF_HEADER_NAME)
) -> Optional[str]:
    return csrf_header


def get_poll_service(
    db: Session = Depends(get_db),
    csrf: CSRFTokenService = Depends(get_csrf_service)
) -> PollService:
    return PollService(db, csrf)
