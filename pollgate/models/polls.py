from pollgate.db.database import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func


# Define Poll model
class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Owner
    question = Column(String, nullable=False)
    options = Column(JSON, nullable=False)  # Ordered list of option texts
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User")


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    option_index = Column(Integer, nullable=False)  # 0-based position in Poll.options
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # One vote per user per poll; inserts that collide are reported as "already voted"
    __table_args__ = (
        UniqueConstraint('poll_id', 'user_id', name='unique_user_vote_per_poll'),
    )
