"""Shared fixtures: in-memory database, manual clock and API client."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gauntlet.db import Base, Challenge, get_db
from gauntlet.engine import ManualClock
from gauntlet.api.common import get_clock
from gauntlet.main import app

START = datetime(2025, 3, 1, 10, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def make_challenge(db):
    def _make(order_index, answer, points=100, is_regex=False, hint=None, is_active=True):
        challenge = Challenge(
            title=f"Challenge {order_index}",
            prompt_md=f"Find flag number {order_index}",
            hint_md=hint,
            answer_pattern=answer,
            is_regex=is_regex,
            points=points,
            order_index=order_index,
            is_active=is_active,
        )
        db.add(challenge)
        db.commit()
        db.refresh(challenge)
        return challenge
    return _make


@pytest.fixture
def two_challenges(make_challenge):
    return [
        make_challenge(1, "cipher1", hint="Think Caesar"),
        make_challenge(2, "cipher2", hint="Think Vigenere"),
    ]


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()
    
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
