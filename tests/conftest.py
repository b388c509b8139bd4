"""
Pytest configuration and fixtures

Every test gets a fresh in-memory SQLite database and fake Oura / breach-check
services; nothing leaves the process.
"""
import os

os.environ.setdefault("DATABASE_DSN", "sqlite://")

from datetime import datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fit360.api.deps import get_breach_client, get_oura_client_factory
from fit360.core.config import settings
from fit360.core.db import Base, get_db
from fit360.core.security import hash_password, new_session_token
from fit360.main import app
from fit360.models import AuthSession, User

from fakes import FakeOura


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
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def oura_api():
    return FakeOura()


@pytest.fixture
def pwned_responses():
    """prefix -> response body (or an httpx.Response to return as-is)."""
    return {}


@pytest.fixture
def breach_client(pwned_responses):
    def handler(request: httpx.Request) -> httpx.Response:
        prefix = request.url.path.rsplit("/", 1)[-1]
        body = pwned_responses.get(prefix, "0018A45C4D1DEF81644B54AB7F969B88D65:1\r\n")
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, text=body)

    with httpx.Client(base_url="https://pwned.test", transport=httpx.MockTransport(handler)) as c:
        yield c


@pytest.fixture
def test_user(db_session):
    user = User(email="runner@example.com", password_hash=hash_password("Str0ng!Pass1234"))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(db_session, test_user):
    session = AuthSession(
        user_id=test_user.id,
        token=new_session_token(),
        expires_at=datetime.utcnow() + timedelta(hours=1),
    )
    db_session.add(session)
    db_session.commit()
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def client(session_factory, breach_client, oura_api, monkeypatch):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_breach_client] = lambda: breach_client
    app.dependency_overrides[get_oura_client_factory] = lambda: oura_api.client
    monkeypatch.setattr(settings, "OURA_PERSONAL_ACCESS_TOKEN", "test-token")

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
