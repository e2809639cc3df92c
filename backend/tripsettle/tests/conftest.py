import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from tripsettle.main import app
from tripsettle.db.base import Base
from tripsettle.db.session import get_db
from tripsettle.models import User, Trip, TripParticipant
from tripsettle.core.security import get_password_hash, create_access_token

# Setup in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a FastAPI TestClient with overridden database dependency."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_user(db_session):
    """Factory creating active users."""
    def _make_user(username: str, name: str = None) -> User:
        user = User(
            username=username,
            name=name or username.capitalize(),
            email=f"{username}@example.com",
            hashed_password=get_password_hash("password123"),
            is_active=True
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


def headers_for(user: User) -> dict:
    """Authorization headers for a user."""
    token = create_access_token(data={"sub": user.username, "user_id": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def trip(db_session, alice, bob, carol):
    """Trip created by Alice with Alice, Bob and Carol on the roster."""
    trip = Trip(title="Bali", destination="Denpasar", description="Team trip", created_by=alice.id)
    db_session.add(trip)
    db_session.flush()
    for user in (alice, bob, carol):
        db_session.add(TripParticipant(trip_id=trip.id, user_id=user.id, is_creator=user.id == alice.id))
    db_session.commit()
    db_session.refresh(trip)
    return trip


@pytest.fixture
def auth_headers():
    """Callable returning Authorization headers for a given user."""
    return headers_for
