# server/core/config.py

"""Settings loaded from environment variables (+ optional .env).

One immutable Settings object is built at startup and handed to
``create_app``; nothing else reads the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()


DEFAULT_JWT_SECRET = "MY_DEMO_SECRET"
STORAGE_BACKENDS = ("json", "sql")


def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_optional(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return tuple(p.strip() for p in raw.replace(",", " ").split() if p.strip())


@dataclass(frozen=True)
class Settings:
    # ---- Tokens ----
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # ---- Storage ----
    storage_backend: str = "json"
    data_dir: Path = Path("data")
    database_url: str = "sqlite:///./data/app.db"

    # ---- HTTP ----
    cors_origins: tuple[str, ...] = ("*",)
    public_url: str | None = None
    host: str = "127.0.0.1"
    port: int = 3000

    # ---- Logging ----
    log_level: str = "INFO"
    log_dir: Path | None = None

    @property
    def jwt_secret_is_default(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def tasks_file(self) -> Path:
        return self.data_dir / "tasks.json"


def load_settings() -> Settings:
    backend = _env("STORAGE_BACKEND", "json").lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )

    log_dir = _env_optional("LOG_DIR")

    return Settings(
        jwt_secret=_env("JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_algorithm=_env("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60),
        storage_backend=backend,
        data_dir=Path(_env("DATA_DIR", "data")).expanduser(),
        database_url=_env("DATABASE_URL", "sqlite:///./data/app.db"),
        cors_origins=_env_list("CORS_ORIGINS", ("*",)),
        public_url=_env_optional("PUBLIC_URL"),
        host=_env("HOST", "127.0.0.1"),
        port=_env_int("PORT", 3000),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
    )
