"""
Note Service: Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests.

Fixtures:
    mock_store:    AsyncMock standing in for a NoteStore (route tests)
    test_client:   HTTPX AsyncClient bound to an app serving mock_store
    sqlite_engine: async engine on a throwaway SQLite file with the notes table
    sql_store:     SqlNoteStore over sqlite_engine
"""

import os
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

# Keep tests away from any real database configured in the environment
os.environ.pop("DATABASE_URL", None)
os.environ["LOG_LEVEL"] = "WARNING"

from noteservice.services.note_store import NoteStore  # noqa: E402
from noteservice.services.sql_note_store import SqlNoteStore  # noqa: E402

# SQLite flavour of backend/sql/001_create_notes_table.sql
NOTES_TABLE_DDL = """
CREATE TABLE notes (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    title   TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT ''
)
"""


@pytest.fixture
def mock_store():
    """
    A NoteStore whose six methods are AsyncMocks.

    Usage:
        mock_store.read_by_id.return_value = Note(id=20, title="t")
        mock_store.remove.side_effect = RowCountError(0, "deleted")
    """
    return AsyncMock(spec=NoteStore)


@pytest_asyncio.fixture
async def test_client(mock_store):
    """
    HTTPX client talking to an app that serves `mock_store`.

    The lifespan does not run under ASGITransport; the store is injected
    through create_app() instead.
    """
    from noteservice.main import create_app

    app = create_app(note_store=mock_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}"


@pytest_asyncio.fixture
async def sqlite_engine(sqlite_url):
    engine = create_async_engine(sqlite_url)
    async with engine.begin() as conn:
        await conn.execute(text(NOTES_TABLE_DDL))
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(sqlite_engine):
    # The fixture disposes the engine; the store is not closed here
    return SqlNoteStore(sqlite_engine)
