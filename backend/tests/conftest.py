"""
Point the app at an in-memory SQLite database before anything imports it,
then build the schema once for the whole run.
"""
import os

os.environ["SQLALCHEMY_URL"] = "sqlite+pysqlite:///:memory:"

import uuid

import pytest
from fastapi.testclient import TestClient

from liftlog import models  # noqa: F401  # registers every table on Base
from liftlog.db import Base, SessionLocal, engine
from liftlog.deps.auth import get_current_user, get_optional_user
from liftlog.main import app
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.repositories.user_repo import UserRepository

Base.metadata.create_all(bind=engine)


def uniq_email(prefix="u"):
    return f"{prefix}-{uuid.uuid4().hex[:8]}@ex.com"


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(name="Lifter"):
        # no password: these users only reach the API through dependency overrides
        user = UserRepository(db).create(email=uniq_email(), name=name, password_hash="")
        db.commit()
        return user
    return _make


@pytest.fixture
def exercises(db):
    repo = ExerciseRepository(db)
    rows = {
        "bench": repo.create(name="Bench Press", category="strength",
                             primary_muscles=["chest"], secondary_muscles=["triceps"]),
        "squat": repo.create(name="Squat", category="strength",
                             primary_muscles=["quadriceps"], secondary_muscles=["glutes"]),
        "row": repo.create(name="Barbell Row", category="strength",
                           primary_muscles=["lats"], secondary_muscles=["biceps"]),
        "press": repo.create(name="Overhead Press", category="strength",
                             primary_muscles=["shoulders"], secondary_muscles=["triceps"]),
    }
    db.commit()
    return rows


@pytest.fixture
def client_as():
    """TestClient acting as ``user`` (or anonymously for ``None``) without a token round-trip."""
    def _as(user):
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user
        return TestClient(app)
    yield _as
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_optional_user, None)
