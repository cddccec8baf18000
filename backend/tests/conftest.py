"""Pytest fixtures: file-backed SQLite database, recreated for every test."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from guestlist.auth import create_access_token
from guestlist.database import Base, get_db, register_sqlite_functions
from guestlist.main import app

# Import all models so they register with Base.metadata
from guestlist.models.organizer import Organizer    # noqa: F401
from guestlist.models.event import Event            # noqa: F401
from guestlist.models.guest import Guest            # noqa: F401
from guestlist.models.invitation import Invitation  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    register_sqlite_functions(engine)

    # WAL so the test's own session never blocks API writes
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def organizer(db):
    """An organizer row plus ready-made auth headers."""
    return create_test_organizer(db)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(organizer_id: str, role: str = "organizer") -> dict:
    return {"Authorization": f"Bearer {create_access_token(organizer_id, role=role)}"}


def create_test_organizer(db, email: str = None, name: str = "Organizer", role: str = "organizer") -> dict:
    """Insert an organizer directly; accounts are owned by the auth service."""
    row = Organizer(
        email=email or f"{uuid.uuid4().hex[:8]}@example.com",
        display_name=name,
        role=role,
    )
    db.add(row)
    db.flush()
    organizer_id = row.organizer_id
    db.commit()
    return {"organizer_id": organizer_id, "headers": auth_headers(organizer_id, role=role)}


def future_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create_test_event(client: TestClient, headers: dict, **overrides) -> dict:
    """Helper: POST /api/events and return the event JSON."""
    payload = {
        "title": "חתונת דנה ויוסי",
        "event_date": future_date(),
        "venue_name": "אולמי הגן",
    }
    payload.update(overrides)
    resp = client.post("/api/events/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["event"]


def create_test_guest(client: TestClient, headers: dict, event_id: str, **overrides) -> dict:
    """Helper: POST /api/events/{id}/guests and return the full response JSON."""
    payload = {"name_hebrew": "ישראל ישראלי", "phone": "050-123-4567"}
    payload.update(overrides)
    resp = client.post(f"/api/events/{event_id}/guests", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
