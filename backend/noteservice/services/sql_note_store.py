"""
Note Service: SQL Note Store
==============================

What:  NoteStore implementation backed by a relational database.
Why:   Each operation is one parameterized statement; the SQL stays readable
       and reviewable next to the contract it fulfils.
How:   SQLAlchemy `text()` statements with named binds, executed on an async
       engine. Reads use engine.connect(); writes use engine.begin(), which
       commits when the block exits cleanly.
Who:   Constructed once in the application lifespan, then shared by all
       requests through the get_note_store dependency.

Statements:
    list    SELECT ... ORDER BY id ASC LIMIT :size OFFSET :offset
    get     SELECT ... WHERE id = :id
    insert  INSERT ... RETURNING id
    delete  DELETE ... WHERE id = :id     (exactly one row)
    update  UPDATE ... WHERE id = :id     (exactly one row)

    INSERT uses RETURNING because asyncpg exposes no last-insert-id.
"""

import logging
from typing import List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from noteservice.config import Settings
from noteservice.database import create_engine_from_settings, dispose_engine, ping
from noteservice.exceptions import NoteNotFoundError, RowCountError, StoreError
from noteservice.schemas.note import Note
from noteservice.services.note_store import NoteStore

logger = logging.getLogger(__name__)


_SELECT_PAGE = text(
    "SELECT id, title, content FROM notes ORDER BY id ASC LIMIT :size OFFSET :offset"
)
_SELECT_BY_ID = text("SELECT id, title, content FROM notes WHERE id = :id")
_INSERT = text("INSERT INTO notes (title, content) VALUES (:title, :content) RETURNING id")
_DELETE = text("DELETE FROM notes WHERE id = :id")
_UPDATE = text("UPDATE notes SET title = :title, content = :content WHERE id = :id")


def _driver_message(exc: BaseException) -> str:
    """The DBAPI's own message, without SQLAlchemy's statement dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class SqlNoteStore(NoteStore):
    """
    Notes persisted in a `notes` table (id, title, content).

    The store owns its engine: close() disposes it and the store is unusable
    afterwards.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @classmethod
    async def connect(cls, settings: Settings) -> "SqlNoteStore":
        """
        Build the pooled engine from `settings` and verify it with a
        liveness probe.

        Raises:
            StoreError: The database could not be reached. The engine is
                disposed before raising.
        """
        engine = create_engine_from_settings(settings)
        try:
            await ping(engine)
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            logger.error("Database liveness probe failed: %s", _driver_message(e))
            raise StoreError(
                message=f"database unreachable: {_driver_message(e)}",
                context={"url": engine.url.render_as_string(hide_password=True)},
            ) from e

        logger.info(
            "Database connection established: %s (pool_size=%d, max_overflow=%d)",
            engine.url.render_as_string(hide_password=True),
            settings.db_pool_size,
            settings.db_max_overflow,
        )
        return cls(engine)

    async def read_list(self, size: int, page: int = 0) -> List[Note]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    _SELECT_PAGE, {"size": size, "offset": page * size}
                )
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes (size=%d, page=%d): %s", size, page, _driver_message(e))
            raise StoreError(
                message=_driver_message(e),
                context={"size": size, "page": page},
            ) from e

        return [Note(id=row.id, title=row.title, content=row.content) for row in rows]

    async def read_by_id(self, note_id: int) -> Note:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(_SELECT_BY_ID, {"id": note_id})
                row = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %d: %s", note_id, _driver_message(e))
            raise StoreError(message=_driver_message(e), context={"note_id": note_id}) from e

        if row is None:
            raise NoteNotFoundError(note_id)
        return Note(id=row.id, title=row.title, content=row.content)

    async def add(self, note: Note) -> int:
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(
                    _INSERT, {"title": note.title, "content": note.content}
                )
                note_id = result.scalar_one()
        except SQLAlchemyError as e:
            logger.error("Database error inserting note: %s", _driver_message(e))
            raise StoreError(message=_driver_message(e)) from e

        logger.debug("Note %d created", note_id)
        return note_id

    async def remove(self, note_id: int) -> None:
        await self._execute_single_row(_DELETE, {"id": note_id}, "deleted")
        logger.debug("Note %d deleted", note_id)

    async def update(self, note: Note) -> None:
        await self._execute_single_row(
            _UPDATE,
            {"id": note.id, "title": note.title, "content": note.content},
            "updated",
        )
        logger.debug("Note %d updated", note.id)

    async def close(self) -> None:
        await dispose_engine(self._engine)

    async def _execute_single_row(self, statement, params: dict, action: str) -> None:
        """
        Execute a write that must touch exactly one row.

        The transaction rolls back when the count is wrong, so a delete or
        update that matched several rows leaves them all untouched.
        """
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(statement, params)
                affected = result.rowcount
                if affected != 1:
                    raise RowCountError(affected, action, context={"id": params["id"]})
        except SQLAlchemyError as e:
            logger.error("Database error (%s note %s): %s", action, params["id"], _driver_message(e))
            raise StoreError(message=_driver_message(e), context={"id": params["id"]}) from e
