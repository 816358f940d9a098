# server/database.py

from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from models import Base


def make_engine(url: str):
    parsed = make_url(url)
    connect_args = {}

    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, connect_args=connect_args)


def make_session_factory(engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


def init_db(engine):
    Base.metadata.create_all(bind=engine)
