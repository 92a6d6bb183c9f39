"""
Note Service: Abstract Note Store Interface
=============================================

What:  Abstract base class defining the persistence contract for notes.
Why:   Route handlers depend on this interface only, so the SQL-backed store
       can be replaced by a mock in tests or another backend later without
       touching a handler.
How:   Concrete stores inherit from NoteStore and implement all six methods.
Who:   Called by the handlers in routes/notes.py.

Implementations:
    - SqlNoteStore: PostgreSQL through an async SQLAlchemy engine
    - AsyncMock(spec=NoteStore): route tests
"""

from abc import ABC, abstractmethod
from typing import List

from noteservice.schemas.note import Note


class NoteStore(ABC):
    """
    Capability set over persisted notes: list, read, add, remove, update,
    close.

    Contract:
        - Every failure surfaces as StoreError or one of its subclasses
        - Each method is one round trip; nothing is cached or retried
    """

    @abstractmethod
    async def read_list(self, size: int, page: int = 0) -> List[Note]:
        """
        Return up to `size` notes ordered by ascending id, skipping the
        first `page * size`.

        An empty page is an empty list, not an error.

        Raises:
            StoreError: The engine rejected size/page, or the query failed.
        """
        ...

    @abstractmethod
    async def read_by_id(self, note_id: int) -> Note:
        """
        Return the note with the given id.

        Raises:
            NoteNotFoundError: No row matched.
            StoreError: The query failed.
        """
        ...

    @abstractmethod
    async def add(self, note: Note) -> int:
        """
        Persist a new note and return the id the store assigned.

        note.id is ignored.
        """
        ...

    @abstractmethod
    async def remove(self, note_id: int) -> None:
        """
        Delete the note with the given id.

        Raises:
            RowCountError: Zero or more than one row was deleted.
            StoreError: The statement failed.
        """
        ...

    @abstractmethod
    async def update(self, note: Note) -> None:
        """
        Replace title and content of the row matching note.id.

        Raises:
            RowCountError: Zero or more than one row was updated.
            StoreError: The statement failed.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connections. Not safe to call twice."""
        ...
