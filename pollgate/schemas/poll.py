from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional, List


# Payloads are deliberately loose: question/option rules are enforced by the
# request gate after the CSRF token and identity checks, with their own messages.
class PollCreate(BaseModel):
    question: Optional[str] = Field(
        None,
        description="Poll question (1-500 characters)",
        json_schema_extra={"example": "What's your favourite programming language?"}
    )
    options: List[Optional[str]] = Field(
        default_factory=list,
        description="2-10 distinct answer options (1-200 characters each)",
        json_schema_extra={"example": ["Python", "Go", "Rust"]}
    )
    csrf_token: Optional[str] = Field(
        None,
        description="CSRF token from GET /api/csrf; may be sent in the X-CSRF-Token header instead"
    )


# Updates replace the question and the whole option list
class PollUpdate(PollCreate):
    pass


class PollRead(BaseModel):
    id: int
    user_id: int
    question: str
    options: List[str]
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VoteCreate(BaseModel):
    option_index: int = Field(..., description="0-based index into the poll's options")
    csrf_token: Optional[str] = Field(
        None,
        description="CSRF token from GET /api/csrf; may be sent in the X-CSRF-Token header instead"
    )


class VoteRead(BaseModel):
    id: int
    poll_id: int
    user_id: int
    option_index: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OptionResult(BaseModel):
    option_index: int
    option: str
    votes: int
    percentage: float


class PollResults(BaseModel):
    poll_id: int
    question: str
    total_votes: int
    results: List[OptionResult]


class PollDeleted(BaseModel):
    message: str
    poll_id: int
    votes_removed: int
