"""
Note Service: Access Log Middleware
=====================================

What:  Tags each request with an id and writes one access-log line per
       request, naming the failure behind a 500.
How:   The exception handlers in main.py attach the raised error to
       request.state via record_failure(); once the response is ready the
       middleware reads it back and picks the log level from its kind.

Log levels:
    2xx/3xx                                        INFO
    RequestParsingError, NoteNotFoundError,
    RowCountError, other 4xx                       WARNING
    any other StoreError, unexpected exceptions    ERROR

Request ids:
    A client-supplied X-Request-ID is reused when it is 1-64 characters of
    [A-Za-z0-9._-]; anything else is replaced by a generated id. The id is
    echoed on every response the handlers render.
"""

import logging
import re
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from noteservice.exceptions import (
    NoteNotFoundError,
    RequestParsingError,
    RowCountError,
)

logger = logging.getLogger("noteservice.access")

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Failures caused by the request itself rather than the database
_CLIENT_FAILURES = (RequestParsingError, NoteNotFoundError, RowCountError)


def resolve_request_id(supplied: Optional[str]) -> str:
    if supplied and _VALID_REQUEST_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:12]


def record_failure(request: Request, exc: Exception) -> None:
    """Remember the error behind this request's response for the access log."""
    request.state.failure = exc


def access_log_level(status: int, failure: Optional[Exception]) -> int:
    if isinstance(failure, _CLIENT_FAILURES):
        return logging.WARNING
    if failure is not None or status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            # Unhandled errors are rendered outside this middleware
            self._log(request, rid, 500, exc, start)
            raise

        response.headers[REQUEST_ID_HEADER] = rid
        failure = getattr(request.state, "failure", None)
        self._log(request, rid, response.status_code, failure, start)
        return response

    @staticmethod
    def _log(
        request: Request,
        rid: str,
        status: int,
        failure: Optional[Exception],
        start: float,
    ) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        kind = type(failure).__name__ if failure is not None else "-"
        logger.log(
            access_log_level(status, failure),
            "%s %s %d %s %.1fms [%s]",
            request.method,
            request.url.path,
            status,
            kind,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "status": status,
                "failure": kind,
                "duration_ms": round(duration_ms, 2),
            },
        )
