"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database, an in-memory blob store
that records calls, and a token service with a fixed secret. API tests run
the real application through httpx with those collaborators swapped in via
dependency overrides.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("STORAGE_BACKEND", "local")

from collections.abc import AsyncGenerator  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import storefront.models  # noqa: E402,F401
from storefront.api.deps import get_blob_store, get_token_service  # noqa: E402
from storefront.core.database import Base, get_db  # noqa: E402
from storefront.core.exceptions import BlobStoreError  # noqa: E402
from storefront.core.security import TokenService  # noqa: E402
from storefront.main import app as storefront_app  # noqa: E402
from storefront.modules.storage import BlobStore, StoredBlob  # noqa: E402

TEST_SECRET = "test-secret-key-with-at-least-32-bytes"


class FakeBlobStore(BlobStore):
    """In-memory blob store recording uploads and deletions."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.deletes: list[str] = []
        self.fail_upload = False
        self.fail_delete = False

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> StoredBlob:
        if self.fail_upload:
            raise BlobStoreError("upload refused")
        public_id = f"products/{uuid4().hex}"
        self.blobs[public_id] = data
        self.uploads.append(filename)
        return StoredBlob(url=f"https://images.test/{public_id}.png", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        self.deletes.append(public_id)
        if self.fail_delete:
            raise BlobStoreError("delete refused")
        self.blobs.pop(public_id, None)


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service-level tests."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_SECRET)


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    blob_store: FakeBlobStore,
    token_service: TokenService,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the application wired to the test collaborators."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    storefront_app.dependency_overrides[get_db] = override_get_db
    storefront_app.dependency_overrides[get_blob_store] = lambda: blob_store
    storefront_app.dependency_overrides[get_token_service] = lambda: token_service

    async with AsyncClient(
        transport=ASGITransport(app=storefront_app), base_url="http://test"
    ) as ac:
        yield ac

    storefront_app.dependency_overrides.clear()


async def _register_user(
    client: AsyncClient,
    email: str,
    user_type: str = "seller",
    password: str = "s3cret-pass",
    name: str = "Test User",
) -> tuple[int, dict[str, str]]:
    """Register through the API; returns the user id and auth headers."""
    response = await client.post(
        "/register",
        json={"name": name, "email": email, "password": password, "userType": user_type},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def register_user(client: AsyncClient):
    """Register accounts through the API."""

    async def _register(email: str, user_type: str = "seller", **kwargs):
        return await _register_user(client, email, user_type, **kwargs)

    return _register
