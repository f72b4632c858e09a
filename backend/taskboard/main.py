from __future__ import annotations

import time
from dataclasses import asdict
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .auth import Identity, TokenIssuer
from .config import Settings
from .db import get_engine
from .deps import get_current_identity, get_service
from .errors import AuthError, InternalError, TaskboardError
from .logging_setup import get_logger
from .models import Base
from .schemas import AuthOut, HealthOut, LoginIn, RegisterIn, StatusIn, TaskCreate, TaskOut, UserOut
from .service import AuthResult, TaskService
from .store import Store, TaskRecord

logger = get_logger(__name__)


def _auth_out(result: AuthResult) -> AuthOut:
    return AuthOut(user=UserOut(**asdict(result.user)), token=result.token)


def _task_out(task: TaskRecord) -> TaskOut:
    return TaskOut(**asdict(task))


def create_app(settings: Settings | None = None, engine=None) -> FastAPI:
    settings = settings or Settings.from_env()
    if engine is None:
        engine = get_engine(settings.database_url)
    if settings.uses_dev_secret:
        logger.warning("insecure_dev_jwt_secret", hint="set JWT_SECRET before deploying")

    issuer = TokenIssuer(settings.jwt_secret, settings.token_ttl_seconds)
    store = Store(engine)

    app = FastAPI(title="Taskboard API")
    app.state.issuer = issuer
    app.state.service = TaskService(store, issuer, settings.pbkdf2_iters)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response

    def _internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "internal_error",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            cause=repr(exc.__cause__),
            exc_info=exc,
        )
        # no internal detail leaks to the client
        return JSONResponse(status_code=500, content={"detail": InternalError.message, "code": InternalError.code})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        return _internal_error(request, exc)

    @app.exception_handler(TaskboardError)
    async def _taskboard_error(request: Request, exc: TaskboardError):
        if isinstance(exc, InternalError):
            return _internal_error(request, exc)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        logger.debug("request_body_rejected", path=request.url.path, errors=exc.errors())
        return JSONResponse(status_code=400, content={"detail": "invalid request body", "code": "ValidationError"})

    @app.on_event("startup")
    def _startup():
        # The database container may still be booting; retry before failing hard.
        last_exc: Exception | None = None
        for attempt in range(1, max(settings.db_init_retries, 1) + 1):
            try:
                Base.metadata.create_all(bind=engine)
                logger.info("database_ready", attempt=attempt)
                return
            except SQLAlchemyError as exc:
                last_exc = exc
                logger.warning("database_not_ready", attempt=attempt, error=str(exc))
                time.sleep(1.0)
        raise RuntimeError(f"DB init failed after retries: {last_exc}")

    @app.get("/health", response_model=HealthOut)
    def health():
        return HealthOut(
            status="ok",
            database="connected" if store.ping() else "disconnected",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @app.post("/users/register", response_model=AuthOut, status_code=201)
    def register(body: RegisterIn | None = None, service: TaskService = Depends(get_service)):
        return _auth_out(service.register((body or RegisterIn()).to_command()))

    @app.post("/users/login", response_model=AuthOut)
    def login(body: LoginIn | None = None, service: TaskService = Depends(get_service)):
        return _auth_out(service.login((body or LoginIn()).to_command()))

    @app.post("/tasks", response_model=TaskOut, status_code=201)
    def create_task(
        body: TaskCreate | None = None,
        identity: Identity = Depends(get_current_identity),
        service: TaskService = Depends(get_service),
    ):
        return _task_out(service.create_task(identity, (body or TaskCreate()).to_command()))

    @app.get("/tasks/{user_id}", response_model=list[TaskOut])
    def list_tasks(
        user_id: str,
        identity: Identity = Depends(get_current_identity),
        service: TaskService = Depends(get_service),
    ):
        return [_task_out(t) for t in service.list_tasks(identity, user_id)]

    @app.put("/tasks/{task_id}/status", response_model=TaskOut)
    def advance_status(
        task_id: str,
        body: StatusIn | None = None,
        identity: Identity = Depends(get_current_identity),
        service: TaskService = Depends(get_service),
    ):
        return _task_out(service.advance_status(identity, (body or StatusIn()).to_command(task_id)))

    return app
