from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from taskboard.auth import TokenIssuer
from taskboard.config import Settings
from taskboard.main import create_app
from taskboard.models import Base
from taskboard.service import TaskService
from taskboard.store import Store

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture()
def settings() -> Settings:
    # low iteration count keeps registration fast in tests
    return Settings(database_url="sqlite://", jwt_secret=TEST_SECRET, pbkdf2_iters=1_000, db_init_retries=1)


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield eng
    eng.dispose()


@pytest.fixture()
def store(engine) -> Store:
    Base.metadata.create_all(bind=engine)
    return Store(engine)


@pytest.fixture()
def issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(settings.jwt_secret)


@pytest.fixture()
def service(store: Store, issuer: TokenIssuer, settings: Settings) -> TaskService:
    return TaskService(store, issuer, settings.pbkdf2_iters)


@pytest.fixture()
def client(settings: Settings, engine):
    app = create_app(settings, engine=engine)
    # entering the context runs the startup hook, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client: TestClient):
    """Register a user over HTTP and return ``(user, auth_headers)``."""

    def _register(name: str = "Ana", email: str = "a@x.com", password: str = "pw1"):
        res = client.post("/users/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register
