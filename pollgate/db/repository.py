"""
Poll store

Table-level access to ``polls`` and ``votes``. Database failures are rolled
back, logged and re-raised as ``UpstreamFailure`` so the service layer only
deals with domain errors.
"""

from contextlib import contextmanager
from typing import Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pollgate.core.errors import UpstreamFailure
from pollgate.models.polls import Poll, Vote

logger = logging.getLogger(__name__)


class PollRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _store_call(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Poll store error during {operation}: {e}")
            raise UpstreamFailure(detail=str(e)) from e

    # Polls

    def insert_poll(self, user_id: int, question: str, options: List[str]) -> Poll:
        with self._store_call("insert poll"):
            poll = Poll(user_id=user_id, question=question, options=options)
            self.db.add(poll)
            self.db.commit()
            self.db.refresh(poll)
            return poll

    def get_poll(self, poll_id: int) -> Optional[Poll]:
        with self._store_call("select poll"):
            return self.db.query(Poll).filter(Poll.id == poll_id).first()

    def get_poll_owner(self, poll_id: int) -> Optional[int]:
        """Owner id of the poll, or None when the poll does not exist"""
        with self._store_call("select poll owner"):
            row = self.db.query(Poll.user_id).filter(Poll.id == poll_id).first()
            return row.user_id if row else None

    def list_polls_for_user(self, user_id: int) -> List[Poll]:
        with self._store_call("select user polls"):
            return (
                self.db.query(Poll)
                .filter(Poll.user_id == user_id)
                .order_by(Poll.created_at.desc(), Poll.id.desc())
                .all()
            )

    def list_all_polls(self) -> List[Poll]:
        with self._store_call("select all polls"):
            return self.db.query(Poll).order_by(Poll.created_at.desc(), Poll.id.desc()).all()

    def update_poll(self, poll_id: int, question: str, options: List[str]) -> Optional[Poll]:
        """
        Replace the question and options.

        Votes for option indexes that no longer exist are removed in the same
        commit, so results always add up.
        """
        with self._store_call("update poll"):
            poll = self.db.query(Poll).filter(Poll.id == poll_id).first()
            if poll is None:
                return None
            poll.question = question
            poll.options = list(options)
            (
                self.db.query(Vote)
                .filter(Vote.poll_id == poll_id, Vote.option_index >= len(options))
                .delete(synchronize_session=False)
            )
            self.db.commit()
            self.db.refresh(poll)
            return poll

    def delete_poll_with_votes(self, poll_id: int) -> int:
        """
        Delete the poll's votes, then the poll, in one transaction.

        Returns the number of vote rows removed.
        """
        with self._store_call("delete poll"):
            removed = (
                self.db.query(Vote)
                .filter(Vote.poll_id == poll_id)
                .delete(synchronize_session=False)
            )
            self.db.flush()
            self.db.query(Poll).filter(Poll.id == poll_id).delete(synchronize_session=False)
            self.db.commit()
            return removed

    # Votes

    def has_voted(self, poll_id: int, user_id: int) -> bool:
        with self._store_call("select vote"):
            return self.db.query(Vote.id).filter(
                Vote.poll_id == poll_id,
                Vote.user_id == user_id
            ).first() is not None

    def insert_vote_if_absent(self, poll_id: int, user_id: int, option_index: int) -> Optional[Vote]:
        """
        Insert a vote unless this user already voted on this poll.

        Relies on the (poll_id, user_id) unique constraint, so two concurrent
        submissions cannot both succeed. Returns None on conflict.
        """
        vote = Vote(poll_id=poll_id, user_id=user_id, option_index=option_index)
        try:
            self.db.add(vote)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self.has_voted(poll_id, user_id):
                return None
            logger.error(f"Vote insert violated an unexpected constraint on poll {poll_id}: {e}")
            raise UpstreamFailure(detail=str(e)) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Poll store error during insert vote: {e}")
            raise UpstreamFailure(detail=str(e)) from e
        self.db.refresh(vote)
        return vote

    def count_votes(self, poll_id: int) -> int:
        with self._store_call("count votes"):
            return self.db.query(func.count(Vote.id)).filter(Vote.poll_id == poll_id).scalar() or 0

    def tally(self, poll_id: int) -> Dict[int, int]:
        """Votes per option index; options without votes are absent"""
        with self._store_call("tally votes"):
            rows = (
                self.db.query(Vote.option_index, func.count(Vote.id).label("votes"))
                .filter(Vote.poll_id == poll_id)
                .group_by(Vote.option_index)
                .all()
            )
            return {row.option_index: int(row.votes) for row in rows}
