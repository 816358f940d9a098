# server/core/users.py

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from core.domain import PublicUser, Role, User
from core.errors import InvalidCredentials, MissingFields, UsernameTaken
from core.storage import JsonCollection
from models.user import UserRecord


logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """
    Registered users and their plaintext credentials.
    Subclasses provide the persistence; validation lives here.
    """

    def register(self, username: str | None, password: str | None, requested_role=None) -> User:
        if not username or not password:
            raise MissingFields("Username and password are required.")

        user = User(username=username, password=password, role=Role.coerce(requested_role))
        self._add(user)
        logger.info("Registered user %s (%s)", user.username, user.role.value)
        return user

    def authenticate(self, username: str | None, password: str | None) -> User:
        user = self.get(username) if username else None
        if user is None or user.password != password:
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()
        return user

    def list_safe(self) -> list[PublicUser]:
        return [user.public() for user in self.all()]

    def exists(self, username: str) -> bool:
        return self.get(username) is not None

    @abstractmethod
    def get(self, username: str) -> User | None: ...

    @abstractmethod
    def all(self) -> list[User]: ...

    @abstractmethod
    def _add(self, user: User) -> None:
        """Persist ``user``, raising UsernameTaken if the name is in use."""


class JsonCredentialStore(CredentialStore):
    def __init__(self, path: str | Path):
        self._collection = JsonCollection(path)

    def all(self) -> list[User]:
        return self._collection.read_as(User)

    def get(self, username: str) -> User | None:
        return next((u for u in self.all() if u.username == username), None)

    def _add(self, user: User) -> None:
        with self._collection.transaction() as records:
            if any(r.get("username") == user.username for r in records):
                raise UsernameTaken()
            records.append(user.model_dump(mode="json"))


def _to_user(row: UserRecord) -> User:
    return User(username=row.username, password=row.password, role=Role.coerce(row.role))


class SqlCredentialStore(CredentialStore):
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def all(self) -> list[User]:
        with self._sessions() as db:
            rows = db.query(UserRecord).order_by(UserRecord.id.asc()).all()
            return [_to_user(r) for r in rows]

    def get(self, username: str) -> User | None:
        with self._sessions() as db:
            row = db.query(UserRecord).filter(UserRecord.username == username).first()
            return _to_user(row) if row else None

    def _add(self, user: User) -> None:
        with self._sessions() as db:
            if db.query(UserRecord).filter(UserRecord.username == user.username).first():
                raise UsernameTaken()
            db.add(UserRecord(username=user.username, password=user.password, role=user.role.value))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise UsernameTaken() from None
