"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite). Service
       tests use `db_session` directly; HTTP tests use `test_client`, which
       points the app's get_db_session dependency at the same database.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬── session_factory ─┬── db_session
               │                    └── test_client
    make_user  (inserts a User with a known password)
    auth_headers (x-auth-token header for a user)
    file_session_factory (file-backed database, one connection per session)
"""

import os

# Settings are read at import time, so the environment must be set before
# anything from postboard is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-with-at-least-thirty-two-bytes"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Callable, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from postboard.database import get_db_session, init_models  # noqa: E402
from postboard.models.user import User  # noqa: E402
from postboard.schemas.auth import Identity  # noqa: E402
from postboard.services.auth_service import gravatar_url, hash_password  # noqa: E402
from postboard.services.token_service import token_service  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory database with all tables created.

    StaticPool keeps a single connection, so every session in the test sees
    the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """
    Session factory on a file-backed SQLite database.

    Each session gets its own connection, so two sessions can hold
    different views of the same row (needed to reproduce lost updates).
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'postboard.db'}")
    await init_models(bind=engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory) -> Callable:
    """
    Factory fixture: `user = await make_user("Ann", "ann@example.com")`.

    Commits through its own session so the user is visible to the HTTP
    client and to `db_session` alike.
    """
    async def _make_user(name: str = "Ann", email: str = "ann@example.com",
                         password: str = TEST_PASSWORD) -> User:
        async with session_factory() as session:
            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password, rounds=4),
                avatar_url=gravatar_url(email),
            )
            session.add(user)
            await session.commit()
            return user
    return _make_user


@pytest.fixture
def identity_of() -> Callable[[User], Identity]:
    return lambda user: Identity(id=user.id)


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """`headers=auth_headers(user)` → {"x-auth-token": <valid token>}"""
    return lambda user: {"x-auth-token": token_service.issue(user.id)}


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient wired to the FastAPI app through ASGITransport.

    get_db_session is overridden with the same commit/rollback behaviour as
    the real dependency, bound to the test database.
    """
    from postboard.main import app

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
