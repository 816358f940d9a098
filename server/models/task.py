# server/models/task.py

from sqlalchemy import Column, Integer, String, Text
from . import Base


class TaskRecord(Base):
    __tablename__ = "tasks"

    # assigned by the store as max(id) + 1
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="open")
    assigned_to = Column(String, index=True, nullable=False)
