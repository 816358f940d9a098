# server/main.py

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from api import auth, tasks, users
from core.config import Settings, load_settings
from core.errors import TaskApiError
from core.logging_setup import setup_logging
from core.tasks import JsonTaskStore, SqlTaskStore, TaskStore
from core.tokens import TokenIssuer
from core.users import CredentialStore, JsonCredentialStore, SqlCredentialStore
from database import init_db, make_engine, make_session_factory


logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Manage tasks assigned to users. Log in through `/api/login` and pass the "
    "returned token with the Authorize button to use the task endpoints."
)


def build_stores(settings: Settings) -> tuple[CredentialStore, TaskStore]:
    if settings.storage_backend == "json":
        logger.info("Using JSON storage in %s", settings.data_dir)
        return JsonCredentialStore(settings.users_file), JsonTaskStore(settings.tasks_file)

    if settings.storage_backend == "sql":
        engine = make_engine(settings.database_url)
        init_db(engine)
        sessions = make_session_factory(engine)
        logger.info("Using SQL storage at %s", engine.url.render_as_string(hide_password=True))
        return SqlCredentialStore(sessions), SqlTaskStore(sessions)

    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    if settings.jwt_secret_is_default:
        logger.warning("JWT_SECRET is not set; tokens are signed with the built-in demo secret")

    servers = [{"url": settings.public_url, "description": "Public server"}] if settings.public_url else None
    app = FastAPI(title="Tasks API", version="1.0.0", description=DESCRIPTION, servers=servers)

    app.state.settings = settings
    app.state.user_store, app.state.task_store = build_stores(settings)
    app.state.token_issuer = TokenIssuer.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskApiError)
    async def handle_task_api_error(request: Request, exc: TaskApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"error": _describe_validation_error(exc)})

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def welcome():
        return "Welcome to the Tasks API with JWT! Visit /docs for documentation."

    app.include_router(auth.router)
    app.include_router(tasks.router)
    app.include_router(users.router)

    return app


def run():
    import uvicorn

    settings = load_settings()
    setup_logging(settings.log_level, settings.log_dir)
    app = create_app(settings)
    logger.info("Docs available at http://%s:%d/docs", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
