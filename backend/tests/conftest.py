"""
Shared fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite, one shared
connection through StaticPool), a fake partner API behind
``httpx.MockTransport`` and, for API tests, an ``httpx.AsyncClient``
talking to the app through ASGITransport with dependencies overridden.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import AsyncGenerator

import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.catalog import country_names
from app.core.config import settings
from app.db.models import Base
from app.esim_access.client import EsimAccessClient
from app.main import app
from tests.factories import FakePartner

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def partner() -> FakePartner:
    return FakePartner()


@pytest_asyncio.fixture
async def esim_client(partner) -> AsyncGenerator[EsimAccessClient, None]:
    client = EsimAccessClient(
        base_url="https://partner.test",
        access_code="test-access-code",
        secret_key="test-secret-key",
        transport=partner.transport(),
    )
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture(autouse=True)
def _reset_country_name_cache():
    country_names.clear_cache()
    yield
    country_names.clear_cache()


# ── Session tokens ────────────────────────────


@dataclass
class SigningKeys:
    private_pem: bytes
    public_pem: str


@pytest.fixture(scope="session")
def signing_keys() -> SigningKeys:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return SigningKeys(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture
def token_factory(signing_keys, monkeypatch):
    """Build bearer tokens the app accepts; the PEM key is configured for the test."""
    monkeypatch.setattr(settings, "CLERK_JWT_KEY", signing_keys.public_pem)
    monkeypatch.setattr(settings, "CLERK_JWKS_URL", "")

    def make(sub: str = "user_buyer", *, expires_in: int = 300, **claims) -> str:
        now = int(time.time())
        payload = {"sub": sub, "iat": now, "exp": now + expires_in, **claims}
        return jwt.encode(payload, signing_keys.private_pem, algorithm="RS256")

    return make


@pytest.fixture
def auth_headers(token_factory):
    def make(sub: str = "user_buyer") -> dict[str, str]:
        return {"Authorization": f"Bearer {token_factory(sub)}"}

    return make


# ── API client ────────────────────────────────


@pytest_asyncio.fixture
async def api(db, esim_client) -> AsyncGenerator[AsyncClient, None]:
    """
    Client for the FastAPI app sharing the test's session.

    Test data should be committed before a request; a failing request
    rolls the shared session back.
    """

    async def override_get_db():
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def override_get_esim_client():
        yield esim_client

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_esim_client] = override_get_esim_client
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
