"""
Request gate

Checks applied before any state-changing poll operation, in this order:

1. CSRF token
2. authenticated identity
3. question/option validation (create and update)
4. ownership or admin role (update and delete), option bounds (vote)

Each check raises a ``GateError`` subclass; nothing here touches the store.
"""

from typing import Iterable, List, Optional, Tuple
import logging

from pollgate.core.constants import BusinessLimits, ErrorMessages
from pollgate.core.csrf import CSRFTokenService
from pollgate.core.errors import Forbidden, InvalidToken, Unauthenticated, ValidationFailed
from pollgate.schemas.user import Identity

logger = logging.getLogger(__name__)


def require_csrf_token(csrf: CSRFTokenService, token: Optional[str]) -> None:
    if not token or not csrf.validate(token):
        logger.warning("Rejected request with missing or invalid CSRF token")
        raise InvalidToken()


def require_identity(identity: Optional[Identity], action: str) -> Identity:
    if identity is None:
        raise Unauthenticated(action)
    return identity


def validate_poll_input(question: Optional[str], options: Iterable[Optional[str]]) -> Tuple[str, List[str]]:
    """
    Validate a poll's question and options and return them trimmed.

    Blank entries (None or "") are dropped before counting, the way an empty
    form field is ignored; whitespace-only entries are kept and rejected as
    empty options.
    """
    submitted = [option for option in options if option]

    if not question or not question.strip():
        raise ValidationFailed(ErrorMessages.QUESTION_REQUIRED)

    # The question limit applies to the text as submitted, options are measured trimmed
    if len(question) > BusinessLimits.MAX_QUESTION_LENGTH:
        raise ValidationFailed(ErrorMessages.QUESTION_TOO_LONG)
    question = question.strip()

    if len(submitted) < BusinessLimits.MIN_POLL_OPTIONS:
        raise ValidationFailed(ErrorMessages.TOO_FEW_OPTIONS)

    if len(submitted) > BusinessLimits.MAX_POLL_OPTIONS:
        raise ValidationFailed(ErrorMessages.TOO_MANY_OPTIONS)

    cleaned = [option.strip() for option in submitted]
    if any(not option for option in cleaned):
        raise ValidationFailed(ErrorMessages.EMPTY_OPTION)

    if any(len(option) > BusinessLimits.MAX_OPTION_LENGTH for option in cleaned):
        raise ValidationFailed(ErrorMessages.OPTION_TOO_LONG)

    if len(set(cleaned)) != len(cleaned):
        raise ValidationFailed(ErrorMessages.DUPLICATE_OPTIONS)

    return question, cleaned


def can_modify_poll(identity: Identity, owner_id: int) -> bool:
    return identity.is_admin or identity.id == owner_id


def authorize_poll_change(identity: Identity, owner_id: int, action: str) -> None:
    if not can_modify_poll(identity, owner_id):
        logger.warning(f"User {identity.id} attempted to {action} a poll owned by user {owner_id}")
        raise Forbidden(ErrorMessages.NOT_AUTHORIZED.format(action=action))


def validate_option_index(option_index: int, option_count: int) -> None:
    if option_index < 0 or option_index >= option_count:
        raise ValidationFailed(ErrorMessages.INVALID_OPTION)
