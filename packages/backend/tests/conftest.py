"""Test fixtures: a fresh in-memory SQLite database per test.

Learn: The app talks to PostgreSQL in production, but everything the
auth core does (upsert with ON CONFLICT ... RETURNING, UPDATE ...
RETURNING, counts) also runs on SQLite, so tests use aiosqlite with a
StaticPool: one shared in-memory connection that disappears when the
engine is disposed.

The app's get_db is overridden with the test session, and
app.state.jwt_config is swapped for a known test secret so tokens can
be minted directly with encode_token().
"""

from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from folio.auth.jwt import IdentityClaims, JWTConfig, encode_token
from folio.db.engine import get_db
from folio.db.models import Base
from folio.main import app
from folio.services.identity_store import IdentityStore

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# 64 hex chars, no weak prefix
TEST_SECRET = "a3f1c9e27b4d8f6051e2c7a9b3d4f8e6a1c5b7d9e2f4a6c8b0d1e3f5a7c9b2d4"
OTHER_SECRET = "e8b2d4f6a1c3e5f7091b3d5f7a9c1e3b5d7f9a1c3e5b7d9f1a3c5e7b9d1f3a5c"


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture()
async def store(db_session):
    return IdentityStore(db_session)


@pytest.fixture()
def jwt_config():
    return JWTConfig(secret=TEST_SECRET, expires_in="7d")


@pytest_asyncio.fixture()
async def client(db_session, jwt_config):
    """HTTP client against the real app, with DB and signing config swapped."""

    async def override_get_db():
        yield db_session

    previous_config = app.state.jwt_config
    previous_error = app.state.jwt_config_error
    app.dependency_overrides[get_db] = override_get_db
    app.state.jwt_config = jwt_config
    app.state.jwt_config_error = None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.jwt_config = previous_config
    app.state.jwt_config_error = previous_error


@pytest.fixture()
def make_token(jwt_config):
    """Mint a token for arbitrary claims with the test signing config."""

    def _make(id: str = "00000000-0000-0000-0000-000000000001",
              email: str = "owner@example.com",
              role: str = "admin",
              config: Optional[JWTConfig] = None) -> str:
        claims = IdentityClaims(id=id, email=email, role=role)
        return encode_token(claims, config or jwt_config)

    return _make