import os
import tempfile

# Settings are read at import time, so the test environment goes first
_test_dir = tempfile.mkdtemp(prefix="streamify-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_test_dir, 'streamify.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_PROVIDER"] = "logging"
os.environ["FIREBASE_SERVICE_ACCOUNT_JSON"] = os.path.join(_test_dir, "missing-firebase.json")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, get_engine, get_session_local
from app.main import app
from app.models import User


@pytest.fixture(autouse=True)
def fresh_schema():
    """Every test starts from empty tables."""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = get_session_local()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Factory creating users directly in the database."""
    def _make_user(user_id, full_name=None, onboarded=True, email=None, **fields):
        user = User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            full_name=full_name or user_id.capitalize(),
            is_onboarded=onboarded,
            native_language=fields.pop("native_language", "english"),
            learning_language=fields.pop("learning_language", "spanish"),
            **fields
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice", "Alice Liddell")


@pytest.fixture
def bob(make_user):
    return make_user("bob", "Bob Builder")


@pytest.fixture
def carol(make_user):
    return make_user("carol", "Carol Danvers")


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
