"""
Note Service: Access Log Middleware Tests
===========================================

What we test:
    ✅ Client request ids are reused only when well formed
    ✅ The failure kind behind a 500 is named in the access log
    ✅ Parse and not-found failures log at WARNING, store outages at ERROR
"""

import logging

import pytest

from noteservice.exceptions import (
    NoteNotFoundError,
    RequestParsingError,
    RowCountError,
    StoreError,
)
from noteservice.middleware.access_log import access_log_level, resolve_request_id
from noteservice.schemas.note import Note


def _access_records(caplog):
    return [r for r in caplog.records if r.name == "noteservice.access"]


class TestResolveRequestId:

    def test_keeps_well_formed_id(self):
        assert resolve_request_id("req-42_a.b") == "req-42_a.b"

    @pytest.mark.parametrize("supplied", [None, "", "has space", "x" * 65, "line\nbreak"])
    def test_replaces_bad_id(self, supplied):
        rid = resolve_request_id(supplied)

        assert rid != supplied
        assert len(rid) == 12


class TestAccessLogLevel:

    def test_success_is_info(self):
        assert access_log_level(200, None) == logging.INFO

    @pytest.mark.parametrize("failure", [
        RequestParsingError("bad"),
        NoteNotFoundError(3),
        RowCountError(0, "deleted"),
    ])
    def test_request_failures_are_warnings(self, failure):
        assert access_log_level(500, failure) == logging.WARNING

    def test_store_failure_level_is_error(self):
        assert access_log_level(500, StoreError("connection refused")) == logging.ERROR

    def test_unmatched_route_is_warning(self):
        assert access_log_level(404, None) == logging.WARNING


class TestAccessLogLines:

    @pytest.mark.asyncio
    async def test_success_line(self, test_client, mock_store, caplog):
        caplog.set_level(logging.INFO, logger="noteservice.access")
        mock_store.read_by_id.return_value = Note(id=1, title="t")

        response = await test_client.get("/notes/get/1", headers={"X-Request-ID": "ok-1"})

        [record] = _access_records(caplog)
        assert response.headers["X-Request-ID"] == "ok-1"
        assert record.levelno == logging.INFO
        assert record.status == 200
        assert record.failure == "-"
        assert record.request_id == "ok-1"

    @pytest.mark.asyncio
    async def test_not_found_names_failure(self, test_client, mock_store, caplog):
        caplog.set_level(logging.INFO, logger="noteservice.access")
        mock_store.read_by_id.side_effect = NoteNotFoundError(9)

        response = await test_client.get("/notes/get/9")

        [record] = _access_records(caplog)
        assert response.status_code == 500
        assert record.levelno == logging.WARNING
        assert record.failure == "NoteNotFoundError"
        assert record.request_id == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_parse_failure_names_failure(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="noteservice.access")

        await test_client.get("/notes/list/ten")

        [record] = _access_records(caplog)
        assert record.failure == "RequestParsingError"
        assert record.levelno == logging.WARNING

    @pytest.mark.asyncio
    async def test_store_outage_is_error(self, test_client, mock_store, caplog):
        caplog.set_level(logging.INFO, logger="noteservice.access")
        mock_store.read_list.side_effect = StoreError("connection refused")

        await test_client.get("/notes/list/5")

        [record] = _access_records(caplog)
        assert record.levelno == logging.ERROR
        assert record.failure == "StoreError"
        assert "StoreError" in record.getMessage()
