from fastapi import APIRouter, Depends
from typing import List, Optional

from pollgate.api.endpoints.dependencies import get_current_identity_optional, get_poll_service
from pollgate.api.responses import ADMIN_REQUIRED_RESPONSE, AUTH_ERROR_RESPONSE
from pollgate.schemas.poll import PollRead
from pollgate.schemas.user import Identity
from pollgate.services.polls import PollService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/polls",
    response_model=List[PollRead],
    summary="List every poll",
    description="All polls from all users, newest first. Admins only.",
    responses={401: AUTH_ERROR_RESPONSE, 403: ADMIN_REQUIRED_RESPONSE}
)
def list_all_polls(
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    polls: PollService = Depends(get_poll_service)
):
    return polls.list_all_polls(identity)
