# server/core/tasks.py

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from core.domain import DEFAULT_STATUS, Task, TaskPatch
from core.errors import Forbidden, MissingFields, NotFound
from core.storage import JsonCollection
from models.task import TaskRecord


logger = logging.getLogger(__name__)

MIN_ROW_ID = -(2 ** 63)
MAX_ROW_ID = 2 ** 63 - 1


class TaskStore(ABC):
    """
    Ordered collection of tasks.

    New ids are ``max(existing ids) + 1`` (``1`` when empty), so an id is
    never handed out while a task still holds it.

    ``update`` with an ``owner`` only applies if the task is still assigned
    to that user when the write happens.
    """

    def create(
        self,
        title: str | None,
        description: str | None,
        assigned_to: str | None,
        status: str | None = None,
    ) -> Task:
        if not title or not description or not assigned_to:
            raise MissingFields("Missing required fields: title, description, assignedTo.")

        task = self._insert({
            "title": title,
            "description": description,
            "status": status or DEFAULT_STATUS,
            "assigned_to": assigned_to,
        })
        logger.info("Created task %d for %s", task.id, task.assigned_to)
        return task

    def update(
        self,
        task_id: int,
        patch: TaskPatch,
        allow_reassign: bool,
        owner: str | None = None,
    ) -> Task:
        changes = patch.changes()
        if not allow_reassign:
            changes.pop("assigned_to", None)

        task = self._apply(task_id, changes, owner)
        logger.info("Updated task %d (%s)", task_id, ", ".join(sorted(changes)) or "no changes")
        return task

    def list_assigned_to(self, username: str) -> list[Task]:
        return [t for t in self.list() if t.assigned_to == username]

    @abstractmethod
    def list(self) -> list[Task]: ...

    @abstractmethod
    def get(self, task_id: int) -> Task: ...

    @abstractmethod
    def delete(self, task_id: int) -> None: ...

    @abstractmethod
    def _insert(self, fields: dict) -> Task: ...

    @abstractmethod
    def _apply(self, task_id: int, changes: dict, owner: str | None) -> Task: ...


def _check_owner(task_id: int, assigned_to: str, owner: str | None) -> None:
    if owner is not None and assigned_to != owner:
        logger.info("Task %d was reassigned away from %s before the update", task_id, owner)
        raise Forbidden("Not allowed to update this task")


# -------------------------------
# JSON file backend
# -------------------------------

def _index_of(records: list[dict], task_id: int) -> int:
    for i, r in enumerate(records):
        if r.get("id") == task_id:
            return i
    raise NotFound()


class JsonTaskStore(TaskStore):
    def __init__(self, path: str | Path):
        self._collection = JsonCollection(path)

    def list(self) -> list[Task]:
        return self._collection.read_as(Task)

    def get(self, task_id: int) -> Task:
        records = self._collection.read()
        return self._collection.to_model(Task, records[_index_of(records, task_id)])

    def delete(self, task_id: int) -> None:
        with self._collection.transaction() as records:
            del records[_index_of(records, task_id)]
        logger.info("Deleted task %d", task_id)

    def _insert(self, fields: dict) -> Task:
        with self._collection.transaction() as records:
            ids = [self._collection.to_model(Task, r).id for r in records]
            next_id = max(ids, default=0) + 1
            task = Task(id=next_id, **fields)
            records.append(task.model_dump(by_alias=True))
        return task

    def _apply(self, task_id: int, changes: dict, owner: str | None) -> Task:
        with self._collection.transaction() as records:
            index = _index_of(records, task_id)
            task = self._collection.to_model(Task, records[index])
            _check_owner(task_id, task.assigned_to, owner)
            task = task.model_copy(update=changes)
            records[index] = task.model_dump(by_alias=True)
        return task


# -------------------------------
# SQL backend
# -------------------------------

def _to_task(row: TaskRecord) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description,
        status=row.status,
        assigned_to=row.assigned_to,
    )


class SqlTaskStore(TaskStore):
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory
        self._insert_lock = Lock()

    def list(self) -> list[Task]:
        with self._sessions() as db:
            rows = db.query(TaskRecord).order_by(TaskRecord.id.asc()).all()
            return [_to_task(r) for r in rows]

    def get(self, task_id: int) -> Task:
        with self._sessions() as db:
            return _to_task(self._row(db, task_id))

    def delete(self, task_id: int) -> None:
        with self._sessions() as db:
            db.delete(self._row(db, task_id))
            db.commit()
        logger.info("Deleted task %d", task_id)

    def _insert(self, fields: dict) -> Task:
        with self._insert_lock, self._sessions() as db:
            next_id = (db.query(func.max(TaskRecord.id)).scalar() or 0) + 1
            row = TaskRecord(id=next_id, **fields)
            db.add(row)
            db.commit()
            return _to_task(row)

    def _apply(self, task_id: int, changes: dict, owner: str | None) -> Task:
        with self._sessions() as db:
            row = self._row(db, task_id, for_update=True)
            _check_owner(task_id, row.assigned_to, owner)
            for field, value in changes.items():
                setattr(row, field, value)
            db.commit()
            return _to_task(row)

    @staticmethod
    def _row(db, task_id: int, for_update: bool = False) -> TaskRecord:
        # larger ids cannot be bound as a 64-bit INTEGER
        if not MIN_ROW_ID <= task_id <= MAX_ROW_ID:
            raise NotFound()
        query = db.query(TaskRecord).filter(TaskRecord.id == task_id)
        row = (query.with_for_update() if for_update else query).first()
        if row is None:
            raise NotFound()
        return row
