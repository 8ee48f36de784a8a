"""Tests for the per-request logging context."""

import logging

from slotbook.logging_context import (
    RequestIdFilter,
    bind_request,
    current_request,
    get_request_id,
    get_request_logger,
    new_request_id,
)


def _record():
    return logging.LogRecord("slotbook.test", logging.INFO, __file__, 1, "msg", None, None)


class TestBindRequest:
    def test_defaults_outside_a_request(self):
        assert get_request_id() == "-"
        assert current_request().route == "-"

    def test_binds_and_restores(self):
        with bind_request("REQ-1", "GET", "/appointments") as context:
            assert get_request_id() == "REQ-1"
            assert context.route == "GET /appointments"
        assert get_request_id() == "-"

    def test_nested_binding_restores_outer(self):
        with bind_request("REQ-outer"):
            with bind_request("REQ-inner"):
                assert get_request_id() == "REQ-inner"
            assert get_request_id() == "REQ-outer"

    def test_new_request_ids_are_unique(self):
        assert new_request_id() != new_request_id()
        assert len(new_request_id()) == 12


class TestRequestIdFilter:
    def test_injects_id_and_route(self):
        record = _record()
        with bind_request("REQ-7", "POST", "/appointments"):
            assert RequestIdFilter().filter(record)
        assert record.request_id == "REQ-7"
        assert record.request_route == "POST /appointments"

    def test_placeholders_without_request(self):
        record = _record()
        RequestIdFilter().filter(record)
        assert record.request_id == "-"
        assert record.request_route == "-"

    def test_logger_gets_filter_once(self):
        logger = get_request_logger("slotbook.test.once")
        get_request_logger("slotbook.test.once")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
