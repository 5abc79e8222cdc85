import os

# Must be set before the application modules read them
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pollgate.db.database import Base, get_db
from pollgate.core.constants import Role
from pollgate.core.csrf import CSRFTokenService, MemoryTokenStore
from pollgate.core.security import create_access_token, get_password_hash
from pollgate.models.user import User
from pollgate.models.polls import Poll, Vote

# Test database - in-memory SQLite shared by every session of a test
TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "testpass123"

# Hash once; bcrypt is slow on purpose
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def test_engine():
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine):
    """Database session for direct database tests and fixture setup"""
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(test_engine):
    """Test client for the full application, wired to the test database"""
    from main import app

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory creating users directly in the database"""
    def _make_user(email, role=Role.USER, name=None, is_active=True):
        user = User(
            email=email,
            name=name,
            hashed_password=TEST_PASSWORD_HASH,
            role=role.value,
            is_active=is_active
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user("owner@example.com", name="Poll Owner")


@pytest.fixture
def other_user(make_user):
    return make_user("other@example.com", name="Someone Else")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@example.com", role=Role.ADMIN, name="Admin")


@pytest.fixture
def auth_headers_for():
    """Build a Bearer header for a user without going through the login endpoint"""
    def _headers(user):
        token = create_access_token(data={"sub": str(user.id), "email": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def owner_headers(owner, auth_headers_for):
    return auth_headers_for(owner)


@pytest.fixture
def other_headers(other_user, auth_headers_for):
    return auth_headers_for(other_user)


@pytest.fixture
def admin_headers(admin_user, auth_headers_for):
    return auth_headers_for(admin_user)


@pytest.fixture
def csrf_token(client):
    """Issue a token; the client keeps the matching cookie"""
    response = client.get("/api/csrf")
    assert response.status_code == 200
    return response.json()["csrfToken"]


@pytest.fixture
def memory_csrf():
    """Token service over an in-memory store, for service-level tests"""
    return CSRFTokenService(MemoryTokenStore())


@pytest.fixture
def make_poll(db_session):
    """Factory creating polls directly in the database"""
    def _make_poll(user, question="Favourite language?", options=None):
        poll = Poll(
            user_id=user.id,
            question=question,
            options=options or ["Python", "Go", "Rust"]
        )
        db_session.add(poll)
        db_session.commit()
        db_session.refresh(poll)
        return poll
    return _make_poll


@pytest.fixture
def test_poll(make_poll, owner):
    return make_poll(owner)


@pytest.fixture
def make_vote(db_session):
    def _make_vote(poll, user, option_index=0):
        vote = Vote(poll_id=poll.id, user_id=user.id, option_index=option_index)
        db_session.add(vote)
        db_session.commit()
        db_session.refresh(vote)
        return vote
    return _make_vote
