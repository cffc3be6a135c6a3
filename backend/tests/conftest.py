"""
NoteShare Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Collaborators are replaced by in-process doubles, except the catalog,
       which is the real SqlCatalogStore on an in-memory SQLite database.

Fixtures:
    ├── identity:        FakeIdentityProvider (users + codes in dicts)
    ├── storage:         InMemoryObjectStorage (objects in a dict)
    ├── ocr:             FakeOCREngine (canned text, records calls)
    ├── catalog:         SqlCatalogStore on sqlite+aiosqlite
    ├── services:        ServiceContext bundling the four above
    ├── test_client:     HTTPX AsyncClient against create_app(context=services)
    ├── png_bytes:       a real (tiny) PNG image
    └── seed_notes:      insert rows with controlled timestamps
"""

import io
import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Settings are read at import time: configure the environment first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["STORAGE_BACKEND"] = "supabase"
os.environ["OCR_ENGINE"] = "tesseract"
os.environ["FRONTEND_BUILD_DIR"] = tempfile.mkdtemp(prefix="noteshare_build_")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from noteshare.database import Base, create_session_factory
from noteshare.dependencies import ServiceContext
from noteshare.exceptions import IdentityServiceError, StorageError
from noteshare.models.note import Note
from noteshare.services.catalog_service import SqlCatalogStore
from noteshare.services.identity_service import IdentityProvider
from noteshare.services.ocr_service import OCREngine
from noteshare.services.storage_service import ObjectStorage

STORAGE_BASE = "https://project.supabase.co"


# ══════════════════════════════════════════════════════════════════════════
# Collaborator Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeIdentityProvider(IdentityProvider):
    """
    Identity service double.

    Every signup gets the verification code "123456". Set `unreachable`
    to simulate a network failure on every call.
    """

    VERIFICATION_CODE = "123456"

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.unreachable = False

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise IdentityServiceError(message="Identity service is unavailable", rejected=False)

    async def sign_up(self, email, password, metadata=None):
        self.calls.append(("sign_up", email, password, metadata))
        self._check_reachable()
        if email in self.users:
            raise IdentityServiceError(message="User already registered", rejected=True, status_code=422)
        user = {"id": str(uuid4()), "email": email, "user_metadata": dict(metadata or {})}
        self.users[email] = {"password": password, "user": user, "confirmed": False}
        return user

    async def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email))
        self._check_reachable()
        record = self.users.get(email)
        if record is None or record["password"] != password:
            raise IdentityServiceError(message="Invalid login credentials", rejected=True, status_code=400)
        return record["user"]

    async def verify_otp(self, email, token, type="signup"):
        self.calls.append(("verify", email, token, type))
        self._check_reachable()
        record = self.users.get(email)
        if record is None or token != self.VERIFICATION_CODE:
            raise IdentityServiceError(message="Token has expired or is invalid", rejected=True, status_code=403)
        record["confirmed"] = True
        return record["user"]


class InMemoryObjectStorage(ObjectStorage):
    """Object storage double; set `fail` to make every upload raise StorageError("Bucket not found")."""

    backend_name = "memory"

    def __init__(self):
        super().__init__(storage_base=STORAGE_BASE, bucket="notes")
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.fail = False

    async def upload(self, object_name, content, content_type):
        if self.fail:
            raise StorageError(message="Bucket not found", context={"object": object_name})
        if object_name in self.objects:
            raise StorageError(message="The resource already exists")
        self.objects[object_name] = {"content": content, "content_type": content_type}


class FakeOCREngine(OCREngine):
    """OCR double returning `text`, or raising `error` when set."""

    engine_name = "fake"

    def __init__(self, text: str = "Extracted lecture text"):
        self.text = text
        self.error: Optional[Exception] = None
        self.calls: List[bytes] = []

    async def extract_text(self, content):
        self.calls.append(content)
        if self.error is not None:
            raise self.error
        return self.text


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def storage():
    return InMemoryObjectStorage()


@pytest.fixture
def ocr():
    return FakeOCREngine()


@pytest_asyncio.fixture
async def sqlite_engine():
    """
    In-memory SQLite engine with the notes table created.

    StaticPool keeps one connection, so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def catalog(sqlite_engine):
    return SqlCatalogStore(create_session_factory(sqlite_engine))


@pytest.fixture
def services(identity, storage, catalog, ocr):
    return ServiceContext(identity=identity, storage=storage, catalog=catalog, ocr=ocr)


@pytest_asyncio.fixture
async def test_client(services):
    """
    HTTPX AsyncClient talking to a fresh app wired to the test doubles.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from noteshare.main import create_app

    app = create_app(context=services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def png_bytes():
    """A real 8x8 white PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def seed_notes(catalog):
    """
    Insert rows directly, oldest first, one minute apart.

    Rows may override any column, including `timestamp`.
    Usage:
        await seed_notes([{"department": "CS"}, {"department": "MATH"}])
    """
    base = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)

    async def _seed(rows: List[Dict[str, Any]]) -> List[Note]:
        notes = []
        async with catalog.session_factory() as session:
            for i, row in enumerate(rows):
                values = {
                    "file_url": f"{STORAGE_BASE}/storage/v1/object/public/notes/{uuid4()}.pdf",
                    "ocr_text": "",
                    "timestamp": base + timedelta(minutes=i),
                }
                values.update(row)
                note = Note(**values)
                session.add(note)
                notes.append(note)
            await session.commit()
        return notes

    return _seed
