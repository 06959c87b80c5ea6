"""Pytest configuration and fixtures."""

import os
import sys
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Test environment, set before any application module reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="profile-uploads-")
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.services.credential_store import CredentialStore
from domain.services.file_lifecycle import FileLifecycleManager, UploadPolicy
from infrastructure.database.models import Base
from infrastructure.storage.local_file_store import LocalFileStore

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

MAX_UPLOAD_BYTES = 2 * 1024 * 1024

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x01" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x02" * 64
GIF_BYTES = b"GIF89a" + b"\x03" * 64


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables for one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Per-test directory for stored photos."""
    return tmp_path / "uploads"


@pytest.fixture
def file_store(upload_dir: Path) -> LocalFileStore:
    return LocalFileStore(upload_dir)


@pytest.fixture
def files(file_store: LocalFileStore) -> FileLifecycleManager:
    """File lifecycle manager with the production upload policy."""
    return FileLifecycleManager(
        file_store,
        UploadPolicy(
            allowed_mime_types=frozenset({"image/jpeg", "image/png"}),
            max_bytes=MAX_UPLOAD_BYTES,
        ),
        url_prefix="/uploads",
    )


@pytest.fixture
def credentials() -> CredentialStore:
    """Low-cost bcrypt for fast tests."""
    return CredentialStore(rounds=4)


def stored_files(directory: Path) -> list[str]:
    """Names of completed files in an upload directory."""
    if not directory.exists():
        return []
    return sorted(p.name for p in directory.iterdir() if not p.name.startswith("."))


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client against the default app."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
    credentials: CredentialStore,
    files: FileLifecycleManager,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client wired to the in-memory database and a per-test
    upload directory.

    This client:
    - Uses an in-memory SQLite database with all tables created
    - Stores photos under the test's tmp_path
    - Overrides both profile services to use the test resources
    """
    from api.v1.dependencies import get_profile_update_service, get_registration_service
    from domain.services.profile_update_service import ProfileUpdateService
    from domain.services.registration_service import RegistrationService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    def override_get_registration_service() -> RegistrationService:
        return RegistrationService(test_uow_factory, credentials=credentials, files=files)

    def override_get_profile_update_service() -> ProfileUpdateService:
        return ProfileUpdateService(test_uow_factory, credentials=credentials, files=files)

    app.dependency_overrides[get_registration_service] = override_get_registration_service
    app.dependency_overrides[get_profile_update_service] = override_get_profile_update_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
