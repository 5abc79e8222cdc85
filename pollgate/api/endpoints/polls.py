from fastapi import APIRouter, Depends, Path, status
from typing import List, Optional

from pollgate.api.endpoints.dependencies import (
    get_current_identity_optional,
    get_header_csrf_token,
    get_poll_service,
)
from pollgate.api.responses import (
    AUTH_ERROR_RESPONSE,
    get_poll_create_responses,
    get_poll_delete_responses,
    get_poll_read_responses,
    get_poll_update_responses,
    get_poll_vote_responses,
)
from pollgate.schemas.poll import (
    PollCreate,
    PollDeleted,
    PollRead,
    PollResults,
    PollUpdate,
    VoteCreate,
    VoteRead,
)
from pollgate.schemas.user import Identity
from pollgate.services.polls import PollService

router = APIRouter(prefix="/polls", tags=["polls"])


@router.post(
    "",
    response_model=PollRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new poll",
    description="Create a poll owned by the signed-in user. Requires a CSRF token.",
    responses=get_poll_create_responses()
)
def create_poll(
    poll: PollCreate,
    header_token: Optional[str] = Depends(get_header_csrf_token),
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    return polls.create_poll(identity, header_token or poll.csrf_token, poll.question, poll.options)


@router.get(
    "",
    response_model=List[PollRead],
    summary="List my polls",
    description="Polls owned by the signed-in user, newest first.",
    responses={401: AUTH_ERROR_RESPONSE}
)
def get_user_polls(
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    return polls.get_user_polls(identity)


@router.get(
    "/{poll_id}",
    response_model=PollRead,
    summary="Get a poll",
    responses=get_poll_read_responses()
)
def get_poll(
    poll_id: int = Path(..., gt=0, description="The ID of the poll"),
    polls: PollService = Depends(get_poll_service)
):
    return polls.get_poll_by_id(poll_id)


@router.get(
    "/{poll_id}/results",
    response_model=PollResults,
    summary="Get poll results",
    description="Vote count and percentage for every option, in option order.",
    responses=get_poll_read_responses()
)
def get_poll_results(
    poll_id: int = Path(..., gt=0, description="The ID of the poll"),
    polls: PollService = Depends(get_poll_service)
):
    return polls.get_poll_results(poll_id)


@router.put(
    "/{poll_id}",
    response_model=PollRead,
    summary="Update a poll",
    description="Replace a poll's question and options. Only the owner or an admin may update. "
                "Requires a CSRF token.",
    responses=get_poll_update_responses()
)
def update_poll(
    poll_update: PollUpdate,
    poll_id: int = Path(..., gt=0, description="The ID of the poll"),
    header_token: Optional[str] = Depends(get_header_csrf_token),
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    return polls.update_poll(
        identity,
        header_token or poll_update.csrf_token,
        poll_id,
        poll_update.question,
        poll_update.options
    )


@router.delete(
    "/{poll_id}",
    response_model=PollDeleted,
    summary="Delete a poll",
    description="Delete a poll and all of its votes. Only the owner or an admin may delete. "
                "Requires a CSRF token in the X-CSRF-Token header.",
    responses=get_poll_delete_responses()
)
def delete_poll(
    poll_id: int = Path(..., gt=0, description="The ID of the poll"),
    header_token: Optional[str] = Depends(get_header_csrf_token),
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    removed = polls.delete_poll(identity, header_token, poll_id)
    return {"message": "Poll deleted successfully", "poll_id": poll_id, "votes_removed": removed}


@router.post(
    "/{poll_id}/vote",
    response_model=VoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Vote on a poll",
    description="Record the signed-in user's single vote on a poll. Requires a CSRF token.",
    responses=get_poll_vote_responses()
)
def submit_vote(
    vote: VoteCreate,
    poll_id: int = Path(..., gt=0, description="The ID of the poll"),
    header_token: Optional[str] = Depends(get_header_csrf_token),
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    return polls.submit_vote(identity, header_token or vote.csrf_token, poll_id, vote.option_index)
