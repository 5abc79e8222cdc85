from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from pollgate.schemas.user import UserRead


class AuthSession(BaseModel):
    """A signed-in session as returned by sign-in and the session endpoint"""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead


class SessionResponse(BaseModel):
    session: Optional[AuthSession] = None


class Token(BaseModel):
    """OAuth2 password flow response"""
    access_token: str
    token_type: str = "bearer"


class CSRFTokenResponse(BaseModel):
    csrfToken: str = Field(..., description="Raw token to send back with mutating requests")


class MessageResponse(BaseModel):
    message: str
