from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from practice_engine import catalog
from practice_engine.db import Base, get_db
from practice_engine.main import app
from practice_engine.schemas import ItemRequest
from practice_engine.settings import settings

AUTO_GRADED = ["listening", "reading"]
USER_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"
OTHER_USER_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


def bearer(user_id):
    """Authorization header carrying a token signed the way the identity provider signs them."""
    claims = {"sub": user_id, "exp": datetime.now(timezone.utc) + timedelta(minutes=30)}
    token = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def section_of(practice_set, skill):
    return next(s for s in practice_set.sections if s.skill == skill)


@pytest.fixture
def practice_set(db):
    return catalog.create_set(db, "ielts", "IELTS Practice Test 1")


@pytest.fixture
def listening(db, practice_set):
    """Listening section with the two items used throughout the tests."""
    section = section_of(practice_set, "listening")
    mcq = catalog.add_item(
        db, section.id,
        ItemRequest(order=1, type="mcq", prompt="Which animal?", options=["cat", "dog"], answers=["a"]),
    )
    gap = catalog.add_item(
        db, section.id,
        ItemRequest(order=2, type="gap", prompt="The sky is ___", answers=["blue"], strict=False),
    )
    return section, mcq, gap


@pytest.fixture
def speaking(db, practice_set):
    section = section_of(practice_set, "speaking")
    item = catalog.add_item(
        db, section.id,
        ItemRequest(order=1, type="speaking", prompt="Describe your hometown."),
    )
    return section, item
