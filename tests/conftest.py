"""Shared fixtures: an in-memory SQLite store, a manager on top of it and an API client."""
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from impostor.database import init_db, make_engine
from impostor.game_manager import GameManager
from impostor.main import create_app


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
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
def manager(session_factory):
    return GameManager(session_factory, rng=random.Random(1234))


@pytest.fixture
def client(session_factory, manager):
    app = create_app(session_factory, manager=manager, run_cleanup=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def room_with_players(manager):
    """Ana hosts, Beto and Carla join. Returns (room, {name: player_id})."""
    room = manager.create_room("Ana")
    ids = {"Ana": room.host_id}
    for name in ("Beto", "Carla"):
        ids[name] = manager.join_room(room.room_id, name).player_id
    return room, ids
