# tests/test_storage.py

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.errors import StorageError
from core.storage import JsonCollection
from core.tasks import JsonTaskStore
from core.users import JsonCredentialStore


def test_missing_file_reads_as_empty(tmp_path):
    collection = JsonCollection(tmp_path / "nothing.json")

    assert collection.read() == []
    assert not collection.path.exists()


def test_transaction_writes_on_success_only(tmp_path):
    collection = JsonCollection(tmp_path / "data" / "items.json")

    with collection.transaction() as records:
        records.append({"id": 1})
    assert collection.read() == [{"id": 1}]

    with pytest.raises(RuntimeError):
        with collection.transaction() as records:
            records.append({"id": 2})
            raise RuntimeError("boom")
    assert collection.read() == [{"id": 1}]


@pytest.mark.parametrize("content", ["{not json", '{"id": 1}'])
def test_corrupt_file_raises_storage_error(tmp_path, content):
    path = tmp_path / "tasks.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageError):
        JsonCollection(path).read()


def test_files_use_wire_field_names(tmp_path):
    tasks = JsonTaskStore(tmp_path / "tasks.json")
    users = JsonCredentialStore(tmp_path / "users.json")

    tasks.create("T", "D", "alice")
    users.register("alice", "pw1")

    assert json.loads((tmp_path / "tasks.json").read_text()) == [
        {"id": 1, "title": "T", "description": "D", "status": "open", "assignedTo": "alice"}
    ]
    assert json.loads((tmp_path / "users.json").read_text()) == [
        {"username": "alice", "password": "pw1", "role": "user"}
    ]


def test_stores_on_same_file_share_data(tmp_path):
    JsonTaskStore(tmp_path / "tasks.json").create("T", "D", "alice")

    assert [t.title for t in JsonTaskStore(tmp_path / "tasks.json").list()] == ["T"]


def test_concurrent_creates_keep_every_write(tmp_path):
    store = JsonTaskStore(tmp_path / "tasks.json")

    with ThreadPoolExecutor(max_workers=8) as pool:
        created = list(pool.map(lambda n: store.create(f"task {n}", "D", "alice"), range(40)))

    assert sorted(t.id for t in created) == list(range(1, 41))
    assert len(store.list()) == 40


@pytest.mark.parametrize("records", [
    [{"username": "x", "password": "p", "role": "root"}],
    [{"username": "x"}],
])
def test_invalid_user_record_raises_storage_error(tmp_path, records):
    path = tmp_path / "users.json"
    path.write_text(json.dumps(records), encoding="utf-8")

    with pytest.raises(StorageError):
        JsonCredentialStore(path).authenticate("x", "p")


@pytest.mark.parametrize("records", [
    [{"id": 1, "title": "T", "description": "D", "status": "open"}],
    [{"id": "one", "title": "T", "description": "D", "assignedTo": "alice"}],
    [5],
])
def test_invalid_task_record_raises_storage_error(tmp_path, records):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    store = JsonTaskStore(path)

    with pytest.raises(StorageError):
        store.list()
    with pytest.raises(StorageError):
        store.create("T", "D", "alice")
    assert json.loads(path.read_text(encoding="utf-8")) == records
