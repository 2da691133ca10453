import os
import sys
import uuid

# settings are read at import time; point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("S3_ACCESS_KEY", "test-access-key")
os.environ.setdefault("S3_SECRET_KEY", "test-secret-key")
os.environ.setdefault("S3_BUCKET_NAME", "test-bucket")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.exceptions import StorageError, StorageObjectNotFoundError
from app.core.security import create_access_token
from app.main import app
from app.models.user import User
from app.services.storage_service import S3StorageService, get_storage_service


class FakeStorage:
    """In-memory stand-in for S3StorageService."""

    def __init__(self, bucket_name="test-bucket"):
        self.bucket_name = bucket_name
        self.objects = {}
        self.fail_uploads = False
        self.fail_downloads = False

    def get_bucket_name(self):
        return self.bucket_name

    def upload(self, data, original_filename, content_type=None):
        if self.fail_uploads:
            raise StorageError("upload failed")
        key = S3StorageService.generate_file_key(original_filename)
        self.objects[key] = data
        return key

    def download(self, key):
        if self.fail_downloads:
            raise StorageError("download failed")
        if key not in self.objects:
            raise StorageObjectNotFoundError(key)
        return self.objects[key]

    def generate_presigned_get_url(self, key, ttl_minutes):
        if key is None:
            return None
        return f"https://storage.test/{self.bucket_name}/{key}?expires={ttl_minutes * 60}"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    async def _make_user(name="Alice", email=None, is_active=True):
        user = User(
            identifier=str(uuid.uuid4()),
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            password_hash="unused",
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user
    return _make_user


def auth_headers(user):
    token = create_access_token({"sub": user.identifier})
    return {"Authorization": f"Bearer {token}"}


PDF_BYTES = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
    b"trailer\n<< /Root 1 0 R >>\n%%EOF"
)
