"""
Note Service: FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error rendering
       and store lifecycle in one place.
How:   create_app() returns a configured FastAPI instance; the lifespan
       opens the note store at startup and closes it at shutdown.
Who:   Started by uvicorn (`uvicorn noteservice.main:app`) or the
       `noteservice` console script.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Connect the SQL note store and run the liveness probe
       (failure aborts startup)
    Shutdown:
    1. Close the store (dispose the connection pool)

Error rendering:
    Every error becomes HTTP 500 with the error message as a plain-text
    body. Parsing errors, missing notes, row-count anomalies and database
    failures are indistinguishable by status code.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from noteservice import __version__
from noteservice.config import settings
from noteservice.exceptions import NoteServiceError
from noteservice.middleware.access_log import (
    AccessLogMiddleware,
    record_failure,
    request_id_var,
)
from noteservice.routes import notes
from noteservice.services.note_store import NoteStore
from noteservice.services.sql_note_store import SqlNoteStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our own access log replaces uvicorn's; engine logging is enabled
    # through `echo` when log_level is DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the note store on startup and close it on shutdown.

    A store handed to create_app() is used as is and left open: whoever
    built it closes it.
    """
    setup_logging()
    logger.info("Note service %s starting up...", __version__)

    owns_store = getattr(app.state, "note_store", None) is None
    if owns_store:
        # Raises StoreError when the database is unreachable, which makes
        # uvicorn abort startup
        app.state.note_store = await SqlNoteStore.connect(settings)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Note service shutting down...")
    if owns_store:
        await app.state.note_store.close()
        app.state.note_store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every failure as HTTP 500 with the error text as body.

    NoteServiceError covers parsing and store failures; the Exception
    fallback catches anything a handler did not anticipate.
    """

    @app.exception_handler(NoteServiceError)
    async def handle_note_service_error(request: Request, exc: NoteServiceError):
        record_failure(request, exc)
        rid = request_id_var.get("")
        logger.warning(
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return PlainTextResponse(
            exc.message,
            status_code=500,
            headers={"X-Content-Type-Options": "nosniff"},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return PlainTextResponse(
            str(exc),
            status_code=500,
            headers={"X-Content-Type-Options": "nosniff"},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(note_store: Optional[NoteStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        note_store: A ready store to serve from. When omitted, the lifespan
            connects a SqlNoteStore from `settings` at startup.
    """
    app = FastAPI(
        title="Note Service API",
        description="CRUD and paginated listing over persisted text notes.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.note_store = note_store

    app.add_middleware(AccessLogMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)

    return app


# uvicorn expects `noteservice.main:app` to be importable
app = create_app()


def run() -> None:
    """Console-script entry point."""
    uvicorn.run(
        "noteservice.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
