import json

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models import FakeListChatModel

from academy import config
from academy.auth import hash_password
from academy.schemas import UserCreate
from academy.services.advisor import Advisor, get_advisor
from academy.storage import MemoryStorage, SqlStorage, get_storage


class FailingChatModel(FakeListChatModel):
    """Chat model whose every call fails, like an unreachable provider."""

    def _call(self, *args, **kwargs):
        raise RuntimeError("provider unavailable")


def fake_advisor(*replies) -> Advisor:
    """Advisor answering with ``replies`` in order; dicts are sent as JSON."""
    responses = [r if isinstance(r, str) else json.dumps(r) for r in replies]
    return Advisor(llm=FakeListChatModel(responses=responses))


def failing_advisor() -> Advisor:
    return Advisor(llm=FailingChatModel(responses=["unused"]))


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Both backends, so every contract test runs against each."""
    if request.param == "memory":
        return MemoryStorage()
    return SqlStorage("sqlite://")


@pytest.fixture()
def memory_storage():
    return MemoryStorage()


@pytest.fixture(autouse=True)
def secret_key(monkeypatch):
    monkeypatch.setattr(config, "SECRET_KEY", "test-secret-key")
    monkeypatch.setattr(config, "GOOGLE_API_KEY", None)


@pytest.fixture()
def advisor():
    # Replace per test with app.dependency_overrides when a reply is needed.
    return failing_advisor()


@pytest.fixture()
def app_storage():
    return MemoryStorage()


@pytest.fixture()
def client(app_storage, advisor):
    from academy.main import app

    app.dependency_overrides[get_storage] = lambda: app_storage
    app.dependency_overrides[get_advisor] = lambda: advisor

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def coach(app_storage):
    return app_storage.create_user(UserCreate(
        username="coach@test.com",
        password=hash_password("password123"),
        role="coach",
        academy_name="Test Academy",
    ))


@pytest.fixture()
def admin(app_storage):
    return app_storage.create_user(UserCreate(
        username="admin@test.com",
        password=hash_password("admin123"),
        role="admin",
        academy_name="Test Academy",
    ))


def _login(client: TestClient, username: str, password: str) -> dict:
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def coach_headers(client, coach):
    return _login(client, "coach@test.com", "password123")


@pytest.fixture()
def admin_headers(client, admin):
    return _login(client, "admin@test.com", "admin123")


@pytest.fixture()
def make_advisor():
    return fake_advisor


@pytest.fixture()
def broken_advisor():
    return failing_advisor()
