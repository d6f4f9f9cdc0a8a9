import os

# Configure before the app modules read their settings.
os.environ.setdefault("CONSISTENCY_DATABASE_URL", "sqlite://")
os.environ.setdefault("CONSISTENCY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("CONSISTENCY_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import storage
from app import app
from db import get_db, init_db, make_engine

PASSWORD = "hunter22"


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    eng = make_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def user(db):
    return storage.create_user(db, "owner@example.com", "not-a-real-hash")


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="me@example.com", password=PASSWORD):
    r = client.post("/api/auth/register", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["user"]


@pytest.fixture()
def register_user():
    return register


@pytest.fixture()
def auth_client(client):
    """A client with a logged-in session."""
    register(client)
    return client
