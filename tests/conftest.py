# tests/conftest.py

from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from main import build_stores, create_app


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing every storage location at a per-test tmp dir.
    """
    return Settings(
        jwt_secret="test-secret",
        data_dir=tmp_path / "data",
        database_url=f"sqlite:///{tmp_path / 'app.db'}",
    )


@pytest.fixture(params=["json", "sql"])
def backend_settings(request, settings: Settings) -> Settings:
    return replace(settings, storage_backend=request.param)


@pytest.fixture()
def stores(backend_settings: Settings):
    return build_stores(backend_settings)


@pytest.fixture()
def user_store(stores):
    return stores[0]


@pytest.fixture()
def task_store(stores):
    return stores[1]


@pytest.fixture()
def app(backend_settings: Settings):
    return create_app(backend_settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def auth_headers(client: TestClient, username: str, password: str, role: str | None = None) -> dict:
    body = {"username": username, "password": password}
    if role is not None:
        body["role"] = role
    assert client.post("/api/register", json=body).status_code == 201

    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def admin_headers(client) -> dict:
    return auth_headers(client, "boss", "bosspw", "admin")


@pytest.fixture()
def alice_headers(client) -> dict:
    return auth_headers(client, "alice", "pw1", "user")


@pytest.fixture()
def bob_headers(client) -> dict:
    return auth_headers(client, "bob", "pw2")
