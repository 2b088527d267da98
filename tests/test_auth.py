import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_user(client: TestClient, email: str, password: str):
    return client.post("/auth/register", json={"email": email, "password": password})


def login(client: TestClient, email: str, password: str):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_first_registered_user_is_admin_only():
    client = TestClient(app)
    first = register_user(client, "broker@example.com", "secret")
    second = register_user(client, "agent@example.com", "secret")
    assert first.status_code == 200 and second.status_code == 200
    assert first.json()["is_admin"] is True
    assert second.json()["is_admin"] is False
    assert "hashed_password" not in first.json()


def test_duplicate_email_returns_400():
    client = TestClient(app)
    assert register_user(client, "dup@example.com", "secret").status_code == 200
    assert register_user(client, "dup@example.com", "secret").status_code == 400


def test_login_returns_bearer_token_and_stamps_last_login():
    client = TestClient(app)
    register_user(client, "login@example.com", "secret")
    resp = login(client, "login@example.com", "secret")
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"
    assert resp.json()["access_token"]

    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "login@example.com").first()
        assert user.last_login is not None


def test_login_failures_return_400():
    client = TestClient(app)
    register_user(client, "wrongpw@example.com", "secret")
    assert login(client, "wrongpw@example.com", "bad").status_code == 400
    assert login(client, "nosuch@example.com", "secret").status_code == 400

    with SessionLocal() as db:
        user = db.query(User).filter(User.email == "wrongpw@example.com").first()
        user.hashed_password = None
        db.commit()
    assert login(client, "wrongpw@example.com", "secret").status_code == 400


def test_me_requires_valid_token():
    client = TestClient(app)
    register_user(client, "me@example.com", "secret")
    token = login(client, "me@example.com", "secret").json()["access_token"]

    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "me@example.com"
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer invalid"}).status_code == 401


def test_inactive_user_token_rejected():
    client = TestClient(app)
    register_user(client, "gone@example.com", "secret")
    token = login(client, "gone@example.com", "secret").json()["access_token"]
    with SessionLocal() as db:
        db.query(User).filter(User.email == "gone@example.com").update({"is_active": False})
        db.commit()

    assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
