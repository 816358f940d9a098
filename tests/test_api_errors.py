# tests/test_api_errors.py

import json

import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture()
def json_client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def _write(path, records):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records), encoding="utf-8")


def test_invalid_user_record_answers_500_with_error_body(settings, json_client):
    _write(settings.users_file, [{"username": "x", "password": "p", "role": "root"}])

    response = json_client.post("/api/login", json={"username": "x", "password": "p"})

    assert response.status_code == 500
    assert "error" in response.json()


def test_invalid_task_record_answers_500_with_error_body(settings, json_client):
    json_client.post("/api/register", json={"username": "boss", "password": "pw", "role": "admin"})
    token = json_client.post("/api/login", json={"username": "boss", "password": "pw"}).json()["token"]
    _write(settings.tasks_file, [{"id": 1, "title": "T", "description": "D"}])

    response = json_client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 500
    assert "error" in response.json()


def test_unparseable_task_file_answers_500_with_error_body(settings, json_client):
    json_client.post("/api/register", json={"username": "boss", "password": "pw", "role": "admin"})
    token = json_client.post("/api/login", json={"username": "boss", "password": "pw"}).json()["token"]
    settings.tasks_file.write_text("{oops", encoding="utf-8")

    response = json_client.get("/api/tasks/1", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 500
    assert "error" in response.json()
