from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func

from pollgate.db.database import Base
from pollgate.core.constants import Role


# Define the User model (the auth store)
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default=Role.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)


# Sessions ended by sign-out; checked on every token lookup until they expire
class RevokedSession(Base):
    __tablename__ = "revoked_sessions"

    jti = Column(String, primary_key=True)
    user_id = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, default=func.now(), nullable=False)
