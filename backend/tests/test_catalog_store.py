"""
NoteShare Backend - Catalog Store Tests
=========================================

What:  Tests for SqlCatalogStore against an in-memory SQLite database.

What we test:
    ✅ insert_note generates id and timestamp, defaults ocr_text to ""
    ✅ Callers cannot set id or timestamp
    ✅ LIKE wildcards in substring filters match literally
    ✅ Database errors become CatalogError with the driver's message, no SQL
    ✅ ping() reports connectivity
"""

import uuid
from datetime import timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from noteshare.database import create_session_factory
from noteshare.exceptions import CatalogError
from noteshare.services.catalog_service import SqlCatalogStore


@pytest_asyncio.fixture
async def broken_catalog():
    """Catalog over a database with no notes table."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield SqlCatalogStore(create_session_factory(engine))
    await engine.dispose()


class TestInsert:

    @pytest.mark.asyncio
    async def test_generates_id_and_timestamp(self, catalog):
        note = await catalog.insert_note({"title": "T", "file_url": "https://x/y.pdf"})

        assert isinstance(note["id"], uuid.UUID)
        assert note["timestamp"].tzinfo is not None
        assert note["ocr_text"] == ""
        assert note["title"] == "T"

    @pytest.mark.asyncio
    async def test_caller_cannot_set_id_or_timestamp(self, catalog):
        forced = uuid.uuid4()
        note = await catalog.insert_note({
            "id": forced,
            "timestamp": "1999-01-01",
            "file_url": "https://x/y.pdf",
        })

        assert note["id"] != forced
        assert note["timestamp"].year != 1999

    @pytest.mark.asyncio
    async def test_inserted_row_is_queryable(self, catalog):
        inserted = await catalog.insert_note({"file_url": "https://x/y.pdf", "department": "CS"})

        [row] = await catalog.query_notes({"department": "CS"})

        assert row["id"] == inserted["id"]
        assert row["timestamp"].astimezone(timezone.utc) == inserted["timestamp"]

    @pytest.mark.asyncio
    async def test_database_error_becomes_catalog_error(self, broken_catalog):
        with pytest.raises(CatalogError) as exc_info:
            await broken_catalog.insert_note({"file_url": "https://x/y.pdf"})

        assert exc_info.value.message == "no such table: notes"
        assert "error_type" in exc_info.value.context
        assert "INSERT INTO notes" in exc_info.value.context["error"]


class TestQuery:

    @pytest.mark.asyncio
    async def test_percent_in_filter_is_literal(self, catalog, seed_notes):
        await seed_notes([
            {"title": "a", "class_code": "CS%1"},
            {"title": "b", "class_code": "CS-1"},
        ])

        rows = await catalog.query_notes({"class_code": "%"})

        assert [r["title"] for r in rows] == ["a"]

    @pytest.mark.asyncio
    async def test_underscore_in_filter_is_literal(self, catalog, seed_notes):
        await seed_notes([
            {"title": "a", "professor": "J_Doe"},
            {"title": "b", "professor": "JxDoe"},
        ])

        rows = await catalog.query_notes({"professor": "j_d"})

        assert [r["title"] for r in rows] == ["a"]

    @pytest.mark.asyncio
    async def test_filters_combine_with_and(self, catalog, seed_notes):
        await seed_notes([
            {"title": "a", "semester": "Fall 2024", "department": "CS"},
            {"title": "b", "semester": "Fall 2024", "department": "MATH"},
            {"title": "c", "semester": "Spring 2025", "department": "CS"},
        ])

        rows = await catalog.query_notes({"semester": "Fall 2024", "department": "CS"})

        assert [r["title"] for r in rows] == ["a"]

    @pytest.mark.asyncio
    async def test_null_columns_never_match_substring(self, catalog, seed_notes):
        await seed_notes([{"title": "a", "professor": None}])

        assert await catalog.query_notes({"professor": "a"}) == []

    @pytest.mark.asyncio
    async def test_database_error_becomes_catalog_error(self, broken_catalog):
        with pytest.raises(CatalogError) as exc_info:
            await broken_catalog.query_notes()

        assert exc_info.value.message == "no such table: notes"
        assert "SELECT" not in exc_info.value.message


class TestPing:

    @pytest.mark.asyncio
    async def test_ping(self, catalog):
        assert await catalog.ping() is True
