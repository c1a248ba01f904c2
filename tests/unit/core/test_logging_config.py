"""
Unit Tests for structured logging
"""
import json
import logging

from mentorconnect.core.logging_config import (
    JSONFormatter,
    MentorConnectLogger,
    set_request_id,
    set_user_id,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("mentorconnect", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["logger"] == "mentorconnect"

    def test_extra_fields_and_context(self):
        set_request_id("req-1")
        set_user_id("user-1")
        try:
            data = json.loads(JSONFormatter().format(make_record(event_type="connection", changed=True)))
        finally:
            set_request_id("")
            set_user_id("")

        assert data["event_type"] == "connection"
        assert data["changed"] is True
        assert data["request_id"] == "req-1"
        assert data["user_id"] == "user-1"


def test_connection_event_record():
    test_logger = MentorConnectLogger("mentorconnect.test")
    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(record)

    test_logger.addHandler(Collect())
    test_logger.setLevel(logging.INFO)
    test_logger.log_connection_event("accept", "s1", "a1", True, "accepted", mode="legacy")

    assert len(records) == 1
    record = records[0]
    assert record.connection_action == "accept"
    assert record.outcome == "accepted"
    assert record.mode == "legacy"
