"""
Poll operations

Mutating operations run the request gate before touching the store; read
operations only need the store. Every failure is raised as a ``GateError``.
"""

from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from pollgate.core.constants import ErrorMessages
from pollgate.core.csrf import CSRFTokenService
from pollgate.core.errors import AlreadyVoted, Forbidden, NotFound
from pollgate.db.repository import PollRepository
from pollgate.models.polls import Poll, Vote
from pollgate.schemas.user import Identity
from pollgate.services.gate import (
    authorize_poll_change,
    require_csrf_token,
    require_identity,
    validate_option_index,
    validate_poll_input,
)

logger = logging.getLogger(__name__)


class PollService:
    def __init__(self, db: Session, csrf: CSRFTokenService):
        self.repo = PollRepository(db)
        self.csrf = csrf

    def create_poll(
        self,
        identity: Optional[Identity],
        csrf_token: Optional[str],
        question: Optional[str],
        options: Iterable[Optional[str]]
    ) -> Poll:
        require_csrf_token(self.csrf, csrf_token)
        user = require_identity(identity, "create a poll")
        question, options = validate_poll_input(question, options)

        poll = self.repo.insert_poll(user.id, question, options)
        logger.info(f"Poll created: ID {poll.id} by user {user.id} with {len(options)} options")
        return poll

    def update_poll(
        self,
        identity: Optional[Identity],
        csrf_token: Optional[str],
        poll_id: int,
        question: Optional[str],
        options: Iterable[Optional[str]]
    ) -> Poll:
        require_csrf_token(self.csrf, csrf_token)
        user = require_identity(identity, "update a poll")
        question, options = validate_poll_input(question, options)

        owner_id = self.repo.get_poll_owner(poll_id)
        if owner_id is None:
            raise NotFound()
        authorize_poll_change(user, owner_id, "update")

        poll = self.repo.update_poll(poll_id, question, options)
        if poll is None:
            # Deleted between the owner lookup and the update
            raise NotFound()
        logger.info(f"Poll updated: ID {poll_id} by user {user.id}")
        return poll

    def delete_poll(self, identity: Optional[Identity], csrf_token: Optional[str], poll_id: int) -> int:
        """Delete a poll and its votes. Returns the number of votes removed."""
        require_csrf_token(self.csrf, csrf_token)
        user = require_identity(identity, "delete a poll")

        owner_id = self.repo.get_poll_owner(poll_id)
        if owner_id is None:
            raise NotFound()
        authorize_poll_change(user, owner_id, "delete")

        removed = self.repo.delete_poll_with_votes(poll_id)
        logger.info(f"Poll deleted: ID {poll_id} by user {user.id}, {removed} votes removed")
        return removed

    def submit_vote(
        self,
        identity: Optional[Identity],
        csrf_token: Optional[str],
        poll_id: int,
        option_index: int
    ) -> Vote:
        require_csrf_token(self.csrf, csrf_token)
        user = require_identity(identity, "vote")

        poll = self.repo.get_poll(poll_id)
        if poll is None:
            raise NotFound()
        validate_option_index(option_index, len(poll.options))

        vote = self.repo.insert_vote_if_absent(poll_id, user.id, option_index)
        if vote is None:
            logger.warning(f"User {user.id} attempted to vote again on poll {poll_id}")
            raise AlreadyVoted()
        logger.info(f"Vote recorded: poll {poll_id}, option {option_index}, user {user.id}")
        return vote

    def get_poll_by_id(self, poll_id: int) -> Poll:
        poll = self.repo.get_poll(poll_id)
        if poll is None:
            raise NotFound()
        return poll

    def get_user_polls(self, identity: Optional[Identity]) -> List[Poll]:
        user = require_identity(identity, "view your polls")
        return self.repo.list_polls_for_user(user.id)

    def list_all_polls(self, identity: Optional[Identity]) -> List[Poll]:
        user = require_identity(identity, "view all polls")
        if not user.is_admin:
            logger.warning(f"User {user.id} attempted to list all polls without admin role")
            raise Forbidden(ErrorMessages.ADMIN_REQUIRED)
        return self.repo.list_all_polls()

    def get_poll_results(self, poll_id: int) -> Dict[str, Any]:
        """Vote counts and percentages for every option, in option order"""
        poll = self.get_poll_by_id(poll_id)
        counts = self.repo.tally(poll_id)
        total_votes = self.repo.count_votes(poll_id)

        results = []
        for index, option in enumerate(poll.options):
            votes = counts.get(index, 0)
            percentage = (votes / total_votes * 100.0) if total_votes > 0 else 0.0
            results.append({
                "option_index": index,
                "option": option,
                "votes": votes,
                "percentage": round(percentage, 2),
            })

        return {
            "poll_id": poll.id,
            "question": poll.question,
            "total_votes": total_votes,
            "results": results,
        }
