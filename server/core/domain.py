# server/core/domain.py

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_STATUS = "open"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def coerce(cls, value) -> "Role":
        """
        Returns the role named exactly by ``value``.
        Anything else, including a missing value, falls back to ``user``.
        """
        if isinstance(value, str):
            for role in cls:
                if role.value == value:
                    return role
        return cls.USER


# -------------------------------
# Users
# -------------------------------

class PublicUser(BaseModel):
    username: str
    role: Role


class User(BaseModel):
    username: str
    password: str
    role: Role = Role.USER

    def public(self) -> PublicUser:
        return PublicUser(username=self.username, role=self.role)


class Principal(BaseModel):
    """
    Identity asserted by a verified bearer token.
    """
    username: str
    role: Role


# -------------------------------
# Tasks
# -------------------------------

class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: str
    status: str = DEFAULT_STATUS
    assigned_to: str = Field(alias="assignedTo")


class TaskPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    status: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedTo")

    def changes(self) -> dict:
        # null and absent fields are both left untouched
        return self.model_dump(exclude_none=True)
