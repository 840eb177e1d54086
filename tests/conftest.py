import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.database import get_db
from app.media.uploader import get_media_store
from app.chat.manager import RoomManager, get_room_manager
from fakes import FakeDatabase, FakeMediaStore


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def media():
    return FakeMediaStore()


@pytest.fixture
def rooms():
    return RoomManager()


@pytest.fixture
def client(db, media, rooms):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_media_store] = lambda: media
    app.dependency_overrides[get_room_manager] = lambda: rooms
    # No context manager: startup would try to reach a real MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()
