"""
CSRF protection

Issues and validates double-submit CSRF tokens. The raw token is handed to the
client, which sends it back with every state-changing request; only the
SHA-256 digest is kept, in an HttpOnly cookie the client's scripts cannot read.

The cookie jar is reached through a small ``TokenStore`` interface so the
service can be exercised without an HTTP stack.
"""

from abc import ABC, abstractmethod
import hashlib
import hmac
import logging
import secrets
from typing import Any, Dict, Optional

from fastapi import Request, Response

from pollgate.core.constants import CSRFConfig

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """Return a 256-bit random token as a hex string"""
    return secrets.token_hex(CSRFConfig.TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_safe_method(method: str) -> bool:
    """Safe methods never change state and never need a token"""
    return method.upper() in CSRFConfig.SAFE_METHODS


class TokenStore(ABC):
    """Key-value store holding the token digest between requests"""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, name: str, value: str, **attributes: Any) -> None:
        ...

    @abstractmethod
    def clear(self, name: str) -> None:
        ...


class MemoryTokenStore(TokenStore):
    """Dict-backed store. Keeps the cookie attributes of the last write for inspection."""

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.attributes: Dict[str, Dict[str, Any]] = {}

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def set(self, name: str, value: str, **attributes: Any) -> None:
        self.values[name] = value
        self.attributes[name] = attributes

    def clear(self, name: str) -> None:
        self.values.pop(name, None)
        self.attributes.pop(name, None)


class CookieTokenStore(TokenStore):
    """
    Reads the incoming request cookies and writes the outgoing response cookies.

    A value written during the request shadows the incoming cookie, so a token
    issued and checked within one request sees the newest digest.
    """

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response
        self._pending: Dict[str, Optional[str]] = {}

    def get(self, name: str) -> Optional[str]:
        if name in self._pending:
            return self._pending[name]
        return self.request.cookies.get(name)

    def set(self, name: str, value: str, **attributes: Any) -> None:
        self.response.set_cookie(key=name, value=value, **attributes)
        self._pending[name] = value

    def clear(self, name: str) -> None:
        self.response.delete_cookie(key=name, path=CSRFConfig.COOKIE_PATH)
        self._pending[name] = None


class CSRFTokenService:
    """Issue and validate CSRF tokens against a ``TokenStore``"""

    def __init__(self, store: TokenStore, secure: bool = False):
        self.store = store
        self.secure = secure

    def cookie_attributes(self) -> Dict[str, Any]:
        return {
            "httponly": True,
            "secure": self.secure,
            "samesite": CSRFConfig.SAME_SITE,
            "path": CSRFConfig.COOKIE_PATH,
            "max_age": CSRFConfig.TOKEN_EXPIRY_SECONDS,
        }

    def issue(self) -> str:
        """
        Generate a fresh token, store its digest and return the raw token.

        Each call replaces the previous digest, so only the most recently
        issued token validates.
        """
        token = generate_token()
        self.store.set(CSRFConfig.COOKIE_NAME, hash_token(token), **self.cookie_attributes())
        logger.debug("Issued new CSRF token")
        return token

    def validate(self, candidate: Optional[str]) -> bool:
        stored = self.store.get(CSRFConfig.COOKIE_NAME)
        if not stored or not candidate:
            return False
        return hmac.compare_digest(hash_token(candidate), stored)

    def clear(self) -> None:
        self.store.clear(CSRFConfig.COOKIE_NAME)
