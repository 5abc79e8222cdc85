from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional

from pollgate.core.constants import Role


# Define a schema for registering a new user
class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = Field(None, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str


# Define a schema for reading user data
class UserRead(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    role: Role
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Identity(BaseModel):
    """
    The authenticated caller, resolved once at the auth boundary.

    Authorization checks read ``role`` from here rather than from raw user
    metadata.
    """
    id: int
    email: str
    name: Optional[str] = None
    role: Role = Role.USER

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user) -> "Identity":
        try:
            role = Role(user.role)
        except ValueError:
            # Unknown roles get no privileges
            role = Role.USER
        return cls(id=user.id, email=user.email, name=user.name, role=role)
