"""Database model and poll store tests"""

import pytest
from sqlalchemy.exc import IntegrityError

from pollgate.db.repository import PollRepository
from pollgate.models.polls import Poll, Vote
from pollgate.models.user import User


class TestModels:

    def test_user_defaults(self, db_session):
        user = User(email="plain@example.com", hashed_password="x")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)

        assert user.role == "user"
        assert user.is_active is True
        assert user.created_at is not None

    def test_email_is_unique(self, db_session, owner):
        db_session.add(User(email=owner.email, hashed_password="x"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_options_keep_their_order(self, db_session, make_poll, owner):
        poll = make_poll(owner, options=["zeta", "alpha", "mu"])
        db_session.expire_all()

        assert db_session.get(Poll, poll.id).options == ["zeta", "alpha", "mu"]

    def test_one_vote_per_user_per_poll(self, db_session, test_poll, other_user, make_vote):
        make_vote(test_poll, other_user, 0)

        db_session.add(Vote(poll_id=test_poll.id, user_id=other_user.id, option_index=1))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_same_user_may_vote_on_different_polls(self, db_session, make_poll, owner, other_user, make_vote):
        first = make_poll(owner, question="First?")
        second = make_poll(owner, question="Second?")

        make_vote(first, other_user, 0)
        make_vote(second, other_user, 1)

        assert db_session.query(Vote).filter(Vote.user_id == other_user.id).count() == 2


class TestPollRepository:

    @pytest.fixture
    def repo(self, db_session):
        return PollRepository(db_session)

    def test_get_poll_owner(self, repo, test_poll, owner):
        assert repo.get_poll_owner(test_poll.id) == owner.id
        assert repo.get_poll_owner(9999) is None

    def test_list_newest_first(self, repo, make_poll, owner):
        first = make_poll(owner, question="First?")
        second = make_poll(owner, question="Second?")

        assert [p.id for p in repo.list_polls_for_user(owner.id)] == [second.id, first.id]
        assert [p.id for p in repo.list_all_polls()] == [second.id, first.id]

    def test_update_missing_poll_returns_none(self, repo):
        assert repo.update_poll(9999, "Q?", ["a", "b"]) is None

    def test_update_drops_votes_for_removed_options(self, repo, test_poll, owner, other_user, make_vote):
        make_vote(test_poll, owner, 2)
        make_vote(test_poll, other_user, 0)

        repo.update_poll(test_poll.id, "Shorter?", ["Python", "Go"])

        assert repo.tally(test_poll.id) == {0: 1}
        assert repo.count_votes(test_poll.id) == 1
        assert repo.has_voted(test_poll.id, owner.id) is False

    def test_tally_and_count(self, repo, test_poll, owner, other_user, admin_user, make_vote):
        make_vote(test_poll, owner, 2)
        make_vote(test_poll, other_user, 2)
        make_vote(test_poll, admin_user, 0)

        assert repo.tally(test_poll.id) == {0: 1, 2: 2}
        assert repo.count_votes(test_poll.id) == 3

    def test_has_voted(self, repo, test_poll, owner, other_user, make_vote):
        make_vote(test_poll, other_user, 0)

        assert repo.has_voted(test_poll.id, other_user.id) is True
        assert repo.has_voted(test_poll.id, owner.id) is False

    def test_insert_vote_if_absent(self, repo, test_poll, other_user):
        vote = repo.insert_vote_if_absent(test_poll.id, other_user.id, 1)
        assert vote is not None
        assert vote.option_index == 1

        assert repo.insert_vote_if_absent(test_poll.id, other_user.id, 0) is None
        assert repo.count_votes(test_poll.id) == 1
        assert repo.tally(test_poll.id) == {1: 1}

    def test_delete_removes_only_that_polls_votes(
        self, repo, db_session, make_poll, owner, other_user, make_vote
    ):
        doomed = make_poll(owner, question="Doomed?")
        kept = make_poll(owner, question="Kept?")
        make_vote(doomed, owner, 0)
        make_vote(doomed, other_user, 1)
        make_vote(kept, other_user, 0)
        doomed_id = doomed.id

        assert repo.delete_poll_with_votes(doomed_id) == 2

        db_session.expire_all()
        assert db_session.get(Poll, doomed_id) is None
        assert repo.count_votes(doomed_id) == 0
        assert repo.count_votes(kept.id) == 1
