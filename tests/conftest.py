# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the application away from any on-disk database and use a stable secret.
os.environ.setdefault("LIP_DATABASE_URL", "sqlite://")
os.environ.setdefault("LIP_JWT_SECRET", "test-secret-for-localip-pub")
os.environ.setdefault("LIP_TO_STDOUT", "false")

from localip_pub.api.v1.dependencies import get_session_state, get_token_codec
from localip_pub.db.session import Base
from localip_pub.db.session import get_db as app_get_session
from localip_pub.db.time import now_ms
from localip_pub.main import app as fastapi_app
from localip_pub.repositories.address_repo import AddressRepository
from localip_pub.services.session_engine import SessionEngine
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec

TEST_DB_URL = "sqlite://"
TEST_SECRET = "test-secret-for-localip-pub"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int | None = None) -> None:
        self.now = now_ms() if start is None else start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float = 0, *, ms: int = 0) -> int:
        self.now += int(seconds * 1000) + ms
        return self.now


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def state(clock: FakeClock) -> SessionState:
    """Fresh process state driven by the fake clock."""
    return SessionState(clock=clock)


@pytest.fixture()
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET, algorithm="HS256", ttl_seconds=360)


@pytest.fixture()
def repo(db_session: Session) -> AddressRepository:
    return AddressRepository(db_session)


@pytest.fixture()
def session_engine(
    repo: AddressRepository, state: SessionState, codec: TokenCodec
) -> SessionEngine:
    return SessionEngine(repo, state, codec)


@pytest.fixture()
def make_address(session_engine: SessionEngine) -> Callable[..., str]:
    """Create an address through the engine and return its id."""

    def _make(
        address_id: str = "home",
        access_password: str = "access-pw",
        master_password: str = "master-pw",
        lifetime: int | None = None,
    ) -> str:
        result = session_engine.create(address_id, access_password, master_password, lifetime)
        assert result.ok, result.message
        return address_id

    return _make


@pytest.fixture()
def app(
    db_session: Session, state: SessionState, codec: TokenCodec
) -> Iterator[FastAPI]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., object], Callable[..., object]] = {
        app_get_session: _get_session_override,
        get_session_state: lambda: state,
        get_token_codec: lambda: codec,
    }
    fastapi_app.dependency_overrides.update(overrides)
    try:
        yield fastapi_app
    finally:
        for dependency in overrides:
            fastapi_app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
