import os
import tempfile

# cheap hashing and throwaway paths before the app modules read their settings
_TMP = tempfile.mkdtemp(prefix="campus-market-tests-")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP}/default.db")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP, "uploads"))
os.environ["ADMIN_EMAILS"] = "admin@ufl.edu"
os.environ["ALLOWED_EMAIL_DOMAIN"] = "ufl.edu"

import pytest
from fastapi.testclient import TestClient

from campus_market.core.config import Settings
from campus_market.main import create_app

PASSWORD = "Abc123!"


@pytest.fixture
def app(tmp_path):
    cfg = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path}/test.db",
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )
    return create_app(cfg)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(app, client):
    session = app.state.db.session()
    try:
        yield session
    finally:
        session.close()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, email, password=PASSWORD, first="Test", last="User"):
    r = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "first_name": first, "last_name": last},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    body["headers"] = auth(body["token"])
    return body


def create_listing(client, headers, **overrides):
    payload = {
        "title": "Calculus textbook",
        "description": "Stewart, 8th edition, barely used",
        "price": 50,
        "category_id": 1,
        "condition": "good",
        "location": "Library West",
        "images": [],
    }
    payload.update(overrides)
    r = client.post("/api/listings", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def alice(client):
    return register(client, "alice@ufl.edu", first="Alice", last="Gator")


@pytest.fixture
def bob(client):
    return register(client, "bob@ufl.edu", first="Bob", last="Gator")


@pytest.fixture
def carol(client):
    return register(client, "carol@ufl.edu", first="Carol", last="Gator")


@pytest.fixture
def admin(client):
    return register(client, "admin@ufl.edu", first="Ada", last="Admin")
