from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from dotenv import load_dotenv
import logging
import os
import secrets
import uuid

from pollgate.core.constants import AuthConfig, EnvironmentConfig

logger = logging.getLogger(__name__)

# Load environment variables from a .env file
load_dotenv()

# Get the secret key from the environment variables
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    logger.warning("SECRET_KEY is not set; using an ephemeral key, sessions will not survive a restart")
    SECRET_KEY = secrets.token_urlsafe(32)

ALGORITHM = AuthConfig.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = AuthConfig.ACCESS_TOKEN_EXPIRE_MINUTES

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=AuthConfig.BCRYPT_ROUNDS,
    bcrypt__default_ident="2b"
)


def get_environment() -> str:
    return os.getenv("ENVIRONMENT", EnvironmentConfig.DEFAULT_ENVIRONMENT).lower()


def use_secure_cookies() -> bool:
    """Cookies get the Secure flag only when served over HTTPS in production"""
    return get_environment() in EnvironmentConfig.SECURE_COOKIE_ENVIRONMENTS


# Password hashing
def _bcrypt_secret(password: str) -> bytes:
    """bcrypt only looks at the first 72 bytes; hashing and verifying must cut the same way"""
    return password.encode('utf-8')[:AuthConfig.BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    secret = _bcrypt_secret(plain_password)
    try:
        return pwd_context.verify(secret, hashed_password)
    except ValueError:
        # passlib's bcrypt backend probe breaks on newer bcrypt releases
        import bcrypt
        return bcrypt.checkpw(secret, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    secret = _bcrypt_secret(password)
    try:
        return pwd_context.hash(secret)
    except ValueError:
        import bcrypt
        salt = bcrypt.gensalt(rounds=AuthConfig.BCRYPT_ROUNDS)
        return bcrypt.hashpw(secret, salt).decode('utf-8')


# JWT session tokens
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a session token. A unique ``jti`` is added so the session can be revoked."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> dict:
    """Return the claims of a valid token. Raises JWTError when invalid or expired."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


__all__ = [
    "JWTError",
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "verify_password",
    "use_secure_cookies",
]
