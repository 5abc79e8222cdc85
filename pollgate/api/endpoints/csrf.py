from fastapi import APIRouter, Depends, Response

from pollgate.api.endpoints.dependencies import get_csrf_service
from pollgate.core.csrf import CSRFTokenService
from pollgate.schemas.auth import CSRFTokenResponse

router = APIRouter(tags=["csrf"])


@router.get(
    "/csrf",
    response_model=CSRFTokenResponse,
    summary="Issue a CSRF token",
    description="Return a fresh CSRF token and store its hash in an HttpOnly cookie. "
                "Each call replaces the previous token."
)
def issue_csrf_token(response: Response, csrf: CSRFTokenService = Depends(get_csrf_service)):
    token = csrf.issue()
    # The token must never be served from a cache
    response.headers["Cache-Control"] = "no-store"
    return CSRFTokenResponse(csrfToken=token)
