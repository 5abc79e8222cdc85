from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Optional
import logging

from pollgate.api.endpoints.dependencies import (
    get_access_token,
    get_auth_service,
    get_csrf_service,
)
from pollgate.api.responses import AUTH_ERROR_RESPONSE, get_auth_responses
from pollgate.core.constants import AuthConfig
from pollgate.core.csrf import CSRFTokenService
from pollgate.core.errors import Unauthenticated
from pollgate.core.security import use_secure_cookies
from pollgate.schemas.auth import AuthSession, MessageResponse, SessionResponse, Token
from pollgate.schemas.user import LoginRequest, UserCreate, UserRead
from pollgate.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, session: AuthSession) -> None:
    response.set_cookie(
        key=AuthConfig.SESSION_COOKIE_NAME,
        value=session.access_token,
        httponly=True,
        secure=use_secure_cookies(),
        samesite="lax",
        path="/",
        max_age=AuthConfig.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses=get_auth_responses()
)
def register_user(user: UserCreate, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user.

    The optional name is stored as profile metadata. New accounts always get
    the regular user role.
    """
    logger.info(f"Registration attempt for email: {user.email}")
    return auth.sign_up(user.email, user.password, metadata={"name": user.name})


@router.post("/login", response_model=AuthSession, responses=get_auth_responses())
def login(login_data: LoginRequest, response: Response, auth: AuthService = Depends(get_auth_service)):
    """
    Sign in with email and password.

    Returns the session token and also sets it as an HttpOnly cookie, so
    browser clients do not need to handle it.
    """
    session = auth.sign_in_with_password(login_data.email, login_data.password)
    _set_session_cookie(response, session)
    return session


@router.post("/token", response_model=Token, responses=get_auth_responses())
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth: AuthService = Depends(get_auth_service)
):
    """
    OAuth2 password flow for the interactive docs.

    Enter the account's EMAIL ADDRESS in the 'username' field.
    """
    session = auth.sign_in_with_password(form_data.username, form_data.password)
    return {"access_token": session.access_token, "token_type": session.token_type}


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service),
    csrf: CSRFTokenService = Depends(get_csrf_service)
):
    """End the current session and drop the session and CSRF cookies."""
    auth.sign_out(access_token)
    response.delete_cookie(key=AuthConfig.SESSION_COOKIE_NAME, path="/")
    csrf.clear()
    return {"message": "Signed out"}


@router.get("/me", response_model=UserRead, responses={401: AUTH_ERROR_RESPONSE})
def read_current_user(
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service)
):
    session = auth.get_session(access_token)
    if session is None:
        raise Unauthenticated()
    return session.user


@router.get("/session", response_model=SessionResponse)
def read_session(
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service)
):
    """The active session, or ``{"session": null}`` when signed out."""
    return {"session": auth.get_session(access_token)}
