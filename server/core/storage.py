# server/core/storage.py

import json
import logging
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from threading import Lock, RLock
from pydantic import BaseModel, ValidationError

from core.errors import StorageError


logger = logging.getLogger(__name__)

_registry_lock = Lock()
_file_locks = defaultdict(RLock)


def with_file_lock(path: Path):
    with _registry_lock:
        return _file_locks[Path(path).resolve()]


class JsonCollection:
    """
    A list of records stored as one JSON array in one file.

    The whole file is read on every call and rewritten on every write.
    All access goes through a lock shared by every collection on the same
    path, so read-modify-write cycles inside one process never interleave.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = with_file_lock(self.path)

    def read(self) -> list[dict]:
        with self._lock:
            if not self.path.exists():
                return []
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.exception("Failed to read %s", self.path)
                raise StorageError(f"Failed to read {self.path.name}") from e

            if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
                logger.error("%s does not hold a JSON array of objects", self.path)
                raise StorageError(f"Corrupt collection {self.path.name}")
            return data

    def write(self, records: list[dict]) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2)
            except OSError as e:
                logger.exception("Failed to write %s", self.path)
                raise StorageError(f"Failed to write {self.path.name}") from e

    def to_model(self, model: type[BaseModel], record: dict):
        try:
            return model.model_validate(record)
        except ValidationError as e:
            logger.exception("Invalid record in %s", self.path)
            raise StorageError(f"Corrupt record in {self.path.name}") from e

    def read_as(self, model: type[BaseModel]) -> list:
        return [self.to_model(model, r) for r in self.read()]

    @contextmanager
    def transaction(self):
        """
        Yields the current records for in-place mutation and saves them on
        normal exit. Nothing is written if the block raises.
        """
        with self._lock:
            records = self.read()
            yield records
            self.write(records)
