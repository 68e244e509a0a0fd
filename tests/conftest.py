# tests/conftest.py
import os
import tempfile

# Set up test environment variables BEFORE any other imports
_upload_root = tempfile.mkdtemp(prefix="social-media-uploads-")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", os.environ["TEST_DATABASE_URL"])
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", _upload_root)
os.environ.setdefault("FILE_CLEANUP_SCHEDULER", "disabled")
os.environ.setdefault("EMAIL_DRY_RUN", "true")

import base64

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.dependencies import auth, get_upload_storage
from app.database import enable_sqlite_foreign_keys, get_db
from app.domains.file.storage import UploadStorage
from app.main import app
from models import Base, User
from tests.factories import DEFAULT_PASSWORD, create_user

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
JPEG_BYTES = (
    b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    + b"\x00" * 64
    + b"\xff\xd9"
)
TEXT_BYTES = b"just some plain text, not an image at all\n"


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def text_bytes() -> bytes:
    return TEXT_BYTES


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """File backed SQLite database, one per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> UploadStorage:
    """Upload storage rooted in the test's temporary directory."""
    upload_storage = UploadStorage(tmp_path / "uploads" / "profile", tmp_path / "uploads" / "posts")
    upload_storage.ensure_folders()
    return upload_storage


@pytest_asyncio.fixture
async def client(session_factory, storage):
    """Create a test client; every request gets its own session like in production."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    token, _ = auth.create_access_token(
        user_id=user.id, email=user.email, account_name=user.account_name, is_admin=user.is_admin
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def password() -> str:
    return DEFAULT_PASSWORD


# User fixtures
@pytest_asyncio.fixture
async def test_user(test_db) -> User:
    return await create_user(test_db, account_name="alice", email="alice@example.com", username="Alice")


@pytest_asyncio.fixture
async def test_user_2(test_db) -> User:
    return await create_user(test_db, account_name="bob", email="bob@example.com", username="Bob")


@pytest_asyncio.fixture
async def admin_user(test_db) -> User:
    return await create_user(
        test_db, account_name="moderator", email="admin@example.com", username="Admin", is_admin=True
    )


@pytest.fixture
def user_headers(test_user) -> dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture
def user_2_headers(test_user_2) -> dict[str, str]:
    return auth_headers(test_user_2)


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers(admin_user)
