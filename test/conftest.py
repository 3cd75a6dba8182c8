"""
Pytest configuration and fixtures for the pollution reporting API tests

Every test gets a fresh in-memory SQLite database. Background tasks and the
retry job open their own sessions through ``app.db.session.SessionLocal``,
which is patched to point at the same database.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.ratelimit import limiter
from app.db import session as db_session
from app.db.base import Base
from app.db.kv import KVStore
from app.main import app
from app.models import kv_entry  # noqa: F401
from app.services.auth import AuthService
from app.services.setup import seed_default_data

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin123!"
USER_EMAIL = "warga@example.com"
USER_PASSWORD = "Secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(db_session, "SessionLocal", factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def kv(db):
    return KVStore(db)


@pytest.fixture
def seeded_kv(kv):
    """Store with the default pollution types and sectors"""
    seed_default_data(kv)
    return kv


@pytest.fixture
def client(session_factory, seeded_kv):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[db_session.get_db] = override_get_db
    limiter.enabled = False
    # no context manager: lifespan (real database, scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def admin_user(seeded_kv):
    return AuthService(seeded_kv).register(ADMIN_EMAIL, ADMIN_PASSWORD, "Admin", is_admin=True)


@pytest.fixture
def regular_user(seeded_kv):
    return AuthService(seeded_kv).register(USER_EMAIL, USER_PASSWORD, "Warga", "0123456789")


def login(client: TestClient, email: str, password: str) -> dict:
    """Log in and return headers carrying the session cookie."""
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return session_headers(response, client)


def session_headers(response, client: TestClient) -> dict:
    """Turn a Set-Cookie response into explicit request headers."""
    cookie = response.headers["set-cookie"].split(";")[0]
    client.cookies.clear()
    return {"Cookie": cookie}


@pytest.fixture
def admin_headers(client, admin_user):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client, regular_user):
    return login(client, USER_EMAIL, USER_PASSWORD)


NO_BODY = object()


class FakeResponse:
    """``payload=None`` is a JSON null body; leave it out for a body that is not JSON."""

    def __init__(self, status_code=200, payload=NO_BODY, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is NO_BODY:
            raise ValueError("no JSON body")
        return self._payload

    def raise_for_status(self):
        import requests

        if not self.ok:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeHttp:
    """Stands in for the ``requests`` module; records every call."""

    def __init__(self, responses=None, exc=None):
        self.responses = list(responses or [])
        self.exc = exc
        self.calls = []

    def _next(self):
        if self.exc is not None:
            raise self.exc
        return self.responses.pop(0)

    def get(self, url, timeout=None):
        self.calls.append(("GET", url))
        return self._next()

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append((method, url, json, headers))
        return self._next()
