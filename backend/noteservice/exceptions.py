"""
Note Service: Custom Exception Hierarchy
==========================================

What:  Defines application-specific exceptions for the failure kinds a
       request can run into.
Why:   Handlers and the store raise typed errors; one global handler renders
       them, so no route carries its own try/except.
How:   Each exception carries a message and an optional context dict.
       The handler registered in main.py returns the message as a plain-text
       HTTP 500 body.
Who:   Raised by route handlers (parsing) and NoteStore implementations.

Exception Hierarchy:
    NoteServiceError (base)
    ├── RequestParsingError      malformed path parameter or JSON body
    └── StoreError               query or connectivity failure
        ├── NoteNotFoundError    no row matched a read by id
        └── RowCountError        delete/update touched != 1 row

Every class maps to HTTP 500. Clients cannot tell a missing note from a
broken database by status code alone; the message is the only signal.
"""

from typing import Any, Dict, Optional


class NoteServiceError(Exception):
    """
    Base exception for all note service errors.

    Attributes:
        message:  Text written as the response body
        context:  Additional debug info (logged, never returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RequestParsingError(NoteServiceError):
    """
    Raised when a request cannot be decoded before touching the store.

    When:  A path parameter is missing or not a base-10 integer, or the
           JSON body does not decode into a Note.
    """

    def __init__(
        self,
        message: str = "Request could not be parsed",
        parameter: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if parameter:
            ctx["parameter"] = parameter
        super().__init__(message=message, context=ctx)
        self.parameter = parameter


class StoreError(NoteServiceError):
    """
    Raised when the backing store fails a query.

    When:  Connection refused or lost, constraint violation, or a LIMIT or
           OFFSET the engine rejects. The message is the driver's own text.
    """

    def __init__(
        self,
        message: str = "Note store operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NoteNotFoundError(StoreError):
    """Raised by read_by_id when no row carries the requested id."""

    def __init__(self, note_id: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["note_id"] = note_id
        super().__init__(message=f"note with id {note_id} not found", context=ctx)
        self.note_id = note_id


class RowCountError(StoreError):
    """
    Raised when a delete or update affects a row count other than one.

    Zero means the id does not exist; more than one means the id column lost
    its uniqueness. Both leave the request unsatisfied.

    Example messages:
        "0 entries deleted"
        "2 entries updated"
    """

    def __init__(
        self,
        affected: int,
        action: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["affected"] = affected
        ctx["action"] = action
        super().__init__(message=f"{affected} entries {action}", context=ctx)
        self.affected = affected
        self.action = action
