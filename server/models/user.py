# server/models/user.py

from sqlalchemy import Column, Integer, String
from . import Base


# -------------------------------
# User Model
# -------------------------------

class UserRecord(Base):
    """
    Database model for registered users.
    Passwords are stored as given; ``id`` only keeps registration order.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")
