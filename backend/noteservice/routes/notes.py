"""
Note Service: Notes Route Handlers
====================================

What:  Maps /notes URLs onto NoteStore operations.
Why:   Keeps HTTP decoding and encoding out of the store.
How:   Each handler parses its path parameters or JSON body, makes exactly
       one store call, and encodes the result. Failures are raised, never
       rendered here; the global handler in main.py turns every
       NoteServiceError into a plain-text HTTP 500.

Route Inventory:
    GET       /notes                        help text
    GET       /notes/list/{size}            first page of `size` notes
    GET       /notes/list/{size}/{page}     page `page` of `size` notes
    GET       /notes/get/{id}               one note (as a one-element array)
    POST      /notes/create                 JSON note body → stored note
    POST      /notes/update                 JSON note body → confirmation
    GET/POST  /notes/delete/{id}            confirmation

Path parameters are declared as `str` and parsed by parse_int_param(), so a
malformed integer is reported as a plain-text 500 like every other failure.
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from pydantic import ValidationError

from noteservice.exceptions import RequestParsingError
from noteservice.schemas.note import Note, encode_notes
from noteservice.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])

HELP_MESSAGE = (
    "Available services\n"
    "notes/get/[Note_Id]\n"
    "notes/list/[List_Size]\n"
    "notes/list/[List_Size]/[List_Page]\n"
    "notes/create\n"
    " Post with json note as body\n"
    "notes/update\n"
    " Post with json note as body\n"
    "notes/delete/[Note_Id]"
)

# Optional sign followed by ASCII digits, nothing else
_DECIMAL = re.compile(r"[+-]?[0-9]+")


# ── Dependencies and helpers ──────────────────────────────────────────────

def get_note_store(request: Request) -> NoteStore:
    """FastAPI dependency returning the store opened at startup."""
    return request.app.state.note_store


def parse_int_param(name: str, value: Optional[str]) -> int:
    """
    Parse a base-10 integer path parameter.

    Raises:
        RequestParsingError: The value is missing, empty or not a decimal
            integer.
    """
    if value is None:
        raise RequestParsingError(
            message=f'missing path parameter "{name}"',
            parameter=name,
        )
    if not _DECIMAL.fullmatch(value):
        raise RequestParsingError(
            message=f'parsing path parameter "{name}": invalid integer "{value}"',
            parameter=name,
        )
    return int(value)


async def decode_note(request: Request) -> Note:
    """Decode the request body as a JSON note."""
    body = await request.body()
    try:
        return Note.model_validate_json(body)
    except ValidationError as e:
        problems = []
        for err in e.errors(include_url=False):
            field = ".".join(str(part) for part in err["loc"])
            problems.append(f"{field}: {err['msg']}" if field else err["msg"])
        raise RequestParsingError(
            message="decoding note body: " + "; ".join(problems),
        ) from e


def notes_response(*notes: Note) -> Response:
    """JSON array response for one or more notes."""
    return Response(content=encode_notes(*notes), media_type="application/json")


async def read_page(store: NoteStore, size: str, page: Optional[str]) -> Response:
    """
    Page through notes in ascending id order.

    An absent or empty `page` means page 0; `size` is required. Both are
    passed to the store unchecked beyond integer parsing, so a negative size
    is reported by the database.
    """
    page_size = parse_int_param("size", size)
    page_number = 0
    if page:
        page_number = parse_int_param("page", page)

    notes = await store.read_list(page_size, page_number)
    return notes_response(*notes)


# ── Routes ────────────────────────────────────────────────────────────────

@router.get("", response_class=PlainTextResponse, summary="List available services")
async def print_help() -> PlainTextResponse:
    return PlainTextResponse(HELP_MESSAGE)


@router.get("/list/{size}", summary="First page of notes")
async def list_first_page(
    size: str,
    store: NoteStore = Depends(get_note_store),
) -> Response:
    """Same as /notes/list/{size}/0."""
    return await read_page(store, size, None)


@router.get("/list/{size}/{page}", summary="Page of notes ordered by id")
async def list_notes(
    size: str,
    page: str,
    store: NoteStore = Depends(get_note_store),
) -> Response:
    return await read_page(store, size, page)


@router.get("/get/{id}", summary="Get a single note")
async def get_note(
    id: str,
    store: NoteStore = Depends(get_note_store),
) -> Response:
    note_id = parse_int_param("id", id)
    note = await store.read_by_id(note_id)
    return notes_response(note)


@router.post("/create", summary="Create a note")
async def create_note(
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> Response:
    """
    Store the note in the body and echo it back with its assigned id.

    Any id in the body is discarded.
    """
    note = await decode_note(request)
    note_id = await store.add(note)
    logger.info("Created note %d", note_id)
    return notes_response(note.model_copy(update={"id": note_id}))


@router.post("/update", response_class=PlainTextResponse, summary="Replace a note")
async def update_note(
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    note = await decode_note(request)
    await store.update(note)
    logger.info("Updated note %d", note.id)
    return PlainTextResponse(f"Entry with id {note.id} updated")


@router.api_route(
    "/delete/{id}",
    methods=["GET", "POST"],
    response_class=PlainTextResponse,
    summary="Delete a note",
)
async def delete_note(
    id: str,
    store: NoteStore = Depends(get_note_store),
) -> PlainTextResponse:
    note_id = parse_int_param("id", id)
    await store.remove(note_id)
    logger.info("Deleted note %d", note_id)
    return PlainTextResponse(f"Entry with id {note_id} deleted")
