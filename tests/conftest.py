# tests/conftest.py
import os
from datetime import datetime, timedelta, timezone

# Settings are read once at import time, so the environment goes first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-musicbox-0123456789")
os.environ.setdefault("ENVIRONMENT", "staging")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from musicbox.database.core import Base, configure_sqlite, get_db
from musicbox.database import init_db  # noqa: F401  registers every table
from musicbox.entities.song import Song
from musicbox.entities.user import User
from musicbox.exceptions import StorageError
from musicbox.main import app
from musicbox.storage.service import get_storage_service

JWT_SECRET = os.environ["JWT_SECRET_KEY"]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
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
def make_user():
    counter = {"n": 0}

    def _make(db, name="Alice", external_id=None):
        counter["n"] += 1
        user = User(
            external_id=external_id or f"auth|user-{counter['n']}",
            email=f"{name.lower()}{counter['n']}@example.com",
            name=name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_song():
    def _make(db, title="Song", artist="Artist", **fields):
        song = Song(
            title=title,
            artist=artist,
            file_path=fields.pop("file_path", f"{artist}/{title}.mp3".replace(" ", "_")),
            duration_ms=fields.pop("duration_ms", 180_000),
            **fields,
        )
        db.add(song)
        db.commit()
        db.refresh(song)
        return song

    return _make


def make_token(subject: str, **claims) -> str:
    payload = {
        "sub": subject,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(user_or_subject) -> dict:
    subject = getattr(user_or_subject, "external_id", user_or_subject)
    return {"Authorization": f"Bearer {make_token(subject)}"}


class FakeStorage:
    """Stands in for blob storage; signs nothing."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requested = []

    def get_stream_url(self, file_path: str) -> str:
        self.requested.append(file_path)
        if self.fail:
            raise StorageError("Blob storage is not configured")
        return f"https://blobs.example.com/songs/{file_path}?sig=test"


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session_factory):
    """Run a function against a short-lived session and return its result."""

    def _seed(fn):
        with session_factory() as session:
            result = fn(session)
            session.commit()
            return result

    return _seed
