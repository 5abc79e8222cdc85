"""
Auth service

User store and session handling: sign-up, password sign-in, sign-out,
current-user lookup and auth-state listeners. Sessions are signed JWTs;
sign-out records the token's ``jti`` so it stops resolving before it expires.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional
import logging

from fastapi import status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pollgate.core.constants import AuthConfig, ErrorMessages, Role
from pollgate.core.errors import AuthFailure, UpstreamFailure
from pollgate.core.security import (
    JWTError,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from pollgate.models.user import RevokedSession, User
from pollgate.schemas.auth import AuthSession
from pollgate.schemas.user import Identity, UserRead

logger = logging.getLogger(__name__)

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthStateCallback = Callable[[str, Optional[Identity]], None]


class AuthStateListeners:
    """Callbacks notified on sign-up, sign-in and sign-out"""

    def __init__(self):
        self._callbacks: List[AuthStateCallback] = []

    def subscribe(self, callback: AuthStateCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, event: str, identity: Optional[Identity]) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event, identity)
            except Exception:
                # A broken listener must not undo a completed sign-in
                logger.exception(f"Auth state listener failed for event {event}")


auth_state_listeners = AuthStateListeners()


class AuthService:
    def __init__(self, db: Session, listeners: AuthStateListeners = auth_state_listeners):
        self.db = db
        self.listeners = listeners

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> User:
        metadata = metadata or {}
        email = email.strip().lower()

        if len(password) < AuthConfig.MIN_PASSWORD_LENGTH:
            raise AuthFailure(ErrorMessages.PASSWORD_TOO_SHORT)
        if len(password) > AuthConfig.MAX_PASSWORD_LENGTH:
            raise AuthFailure(ErrorMessages.PASSWORD_TOO_LONG)

        try:
            if self.db.query(User).filter(User.email == email).first():
                logger.warning(f"Registration failed: email '{email}' already exists")
                raise AuthFailure(ErrorMessages.USER_ALREADY_REGISTERED)

            # Role is never taken from client metadata
            user = User(
                email=email,
                name=metadata.get("name"),
                hashed_password=get_password_hash(password),
                role=Role.USER.value,
                is_active=True
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise AuthFailure(ErrorMessages.USER_ALREADY_REGISTERED)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during registration: {e}")
            raise UpstreamFailure(detail=str(e))

        logger.info(f"User registered successfully: ID {user.id}")
        self.listeners.emit(SIGNED_UP, Identity.from_user(user))
        return user

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        try:
            user = self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            logger.error(f"Database error during sign-in: {e}")
            raise UpstreamFailure(detail=str(e))

        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for email: {email}")
            raise AuthFailure(ErrorMessages.INVALID_CREDENTIALS, status_code=status.HTTP_401_UNAUTHORIZED)

        expires_delta = timedelta(minutes=AuthConfig.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=expires_delta
        )
        logger.info(f"Login successful for user: {user.id}")
        self.listeners.emit(SIGNED_IN, Identity.from_user(user))
        return AuthSession(
            access_token=access_token,
            token_type=AuthConfig.TOKEN_TYPE,
            expires_at=datetime.now(timezone.utc) + expires_delta,
            user=UserRead.model_validate(user)
        )

    def _claims(self, access_token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Claims of a valid, unrevoked token, otherwise None"""
        if not access_token:
            return None
        try:
            claims = decode_access_token(access_token)
        except JWTError:
            return None

        jti = claims.get("jti")
        if not claims.get("sub") or not jti:
            return None
        try:
            if self.db.get(RevokedSession, jti) is not None:
                return None
        except SQLAlchemyError as e:
            logger.error(f"Database error checking session revocation: {e}")
            raise UpstreamFailure(detail=str(e))
        return claims

    def _load_user(self, claims: Dict[str, Any]) -> Optional[User]:
        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError):
            return None
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error loading user {user_id}: {e}")
            raise UpstreamFailure(detail=str(e))
        if user is None or not user.is_active:
            return None
        return user

    def get_user(self, access_token: Optional[str]) -> Optional[Identity]:
        """The identity behind a session token, or None if not signed in"""
        claims = self._claims(access_token)
        if claims is None:
            return None
        user = self._load_user(claims)
        return Identity.from_user(user) if user else None

    def get_session(self, access_token: Optional[str]) -> Optional[AuthSession]:
        claims = self._claims(access_token)
        if claims is None:
            return None
        user = self._load_user(claims)
        if user is None:
            return None
        return AuthSession(
            access_token=access_token,
            token_type=AuthConfig.TOKEN_TYPE,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            user=UserRead.model_validate(user)
        )

    def sign_out(self, access_token: Optional[str]) -> None:
        """End the session. Signing out without a valid session is a no-op."""
        claims = self._claims(access_token)
        if claims is None:
            return

        identity = None
        user = self._load_user(claims)
        if user is not None:
            identity = Identity.from_user(user)

        try:
            self.db.add(RevokedSession(
                jti=claims["jti"],
                user_id=user.id if user else None,
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(tzinfo=None)
            ))
            self.db.commit()
        except IntegrityError:
            # Already revoked by a concurrent sign-out
            self.db.rollback()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during sign-out: {e}")
            raise UpstreamFailure(detail=str(e))

        logger.info(f"User signed out: {claims['sub']}")
        self.listeners.emit(SIGNED_OUT, identity)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register a callback for auth events. Returns a function that unsubscribes it."""
        return self.listeners.subscribe(callback)
