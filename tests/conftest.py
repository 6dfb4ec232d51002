"""
Pytest fixtures for the game state backend.
"""

import pytest
from typing import List
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, build_engine, get_db
from core.game_manager import GameManager
from services.player_service import register_player
from main import app


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def foreign_keys(engine):
    """Enforce foreign keys the way PostgreSQL always does."""
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def players(db) -> List[int]:
    """Twelve registered players; the first ten make a full table."""
    ids = []
    for i in range(1, 13):
        player = register_player(
            db,
            f"Player{i}",
            photo_url=f"https://i.pravatar.cc/150?img={i}"
        )
        ids.append(player.id)
    return ids


@pytest.fixture
def roster(players) -> List[int]:
    return players[:10]


@pytest.fixture
def bench(players) -> List[int]:
    """Registered players who are not seated in the default roster."""
    return players[10:]


@pytest.fixture
def game(db, roster):
    """An active game seating the default roster."""
    return GameManager.create_game(db, 1, roster)


@pytest.fixture
def client(session_factory):
    """API client bound to the test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
