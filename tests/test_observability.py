"""Tests for observability utilities."""

import json
import logging
from datetime import date

from lodgekeeper.domain.models import Guest, GuestRoster
from lodgekeeper.domain.results import ErrorKind
from lodgekeeper.observability.correlation import (
    accept_correlation_id,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from lodgekeeper.observability.logging import JsonFormatter, _level, get_logger
from lodgekeeper.observability.redaction import (
    redact_string,
    redact_value,
    safe_log_context,
)


class TestRedaction:
    """Tests for redaction helpers."""

    def test_redact_phone_number(self):
        result = redact_string("Call me at +420 123 456 789")
        assert "456" not in result
        assert "[REDACTED]" in result

    def test_redact_email(self):
        result = redact_string("Email: jana@example.com")
        assert "jana@example.com" not in result
        assert "[REDACTED]" in result

    def test_redact_capability_token(self):
        result = redact_string("token abcdefghijklmnopqrstuvwxyz0123 used")
        assert "abcdefghij" not in result
        assert result == "token [REDACTED] used"

    def test_booking_id_kept(self):
        assert redact_string("BKAB12CD34EF567") == "BKAB12CD34EF567"

    def test_redact_value_dict_only_keys(self):
        result = redact_value({"email": "jana@example.com", "name": "Jana"})
        assert "Jana" not in result
        assert "email" in result

    def test_redact_value_list_only_len(self):
        result = redact_value(["a", "b", "c"])
        assert "len=3" in result

    def test_redact_value_scalars(self):
        assert redact_value(None) == "null"
        assert redact_value(True) == "true"
        assert redact_value(3) == "3"

    def test_redact_value_domain_types(self):
        roster = GuestRoster((Guest("adult", "internal", "Jana Novakova"),))

        assert redact_value(roster) == "roster(adults=1, children=0, toddlers=0)"
        assert redact_value(date(2025, 11, 3)) == "2025-11-03"
        assert redact_value(ErrorKind.SEASON) == "season"

    def test_safe_log_context(self):
        ctx = safe_log_context(phone="+420123456789", count=42)
        assert "[REDACTED]" in ctx["phone"]
        assert ctx["count"] == "42"

    def test_secret_keys_always_redacted(self):
        ctx = safe_log_context(token="short", access_code="XMAS2025", code=None, booking_id="BK1")
        assert ctx["token"] == "[REDACTED]"
        assert ctx["access_code"] == "[REDACTED]"
        assert ctx["code"] == "null"
        assert ctx["booking_id"] == "BK1"


class TestCorrelation:
    def test_set_and_reset(self):
        cid = generate_correlation_id()
        token = set_correlation_id(cid)
        try:
            assert get_correlation_id() == cid
        finally:
            reset_correlation_id(token)
        assert get_correlation_id() == ""

    def test_scope_binds_and_restores(self):
        with correlation_scope("req-42") as cid:
            assert cid == "req-42"
            assert get_correlation_id() == "req-42"
        assert get_correlation_id() == ""

    def test_unusable_incoming_id_replaced(self):
        assert accept_correlation_id("ok-1.2:3") == "ok-1.2:3"
        for bad in (None, "", "has space", "x" * 129, "line\nbreak"):
            replaced = accept_correlation_id(bad)
            assert replaced != bad
            assert len(replaced) == 32


class TestJsonLogging:
    def _record(self, **extra_fields):
        record = logging.LogRecord("lodgekeeper.test", logging.INFO, __file__, 1, "hold created", None, None)
        if extra_fields:
            record.extra_fields = extra_fields
        return record

    def test_format_includes_extra_fields(self):
        output = json.loads(JsonFormatter().format(self._record(hold_id="H1", rooms=2)))

        assert output["message"] == "hold created"
        assert output["level"] == "INFO"
        assert output["hold_id"] == "H1"
        assert output["rooms"] == 2
        assert "correlationId" not in output

    def test_role_and_record_time(self):
        record = self._record(message="overwrite attempt", role="x")
        record.created = 1756720800.0  # 2025-09-01T10:00:00Z

        output = json.loads(JsonFormatter(role="worker").format(record))

        assert output["role"] == "worker"
        assert output["message"] == "hold created"
        assert output["timestamp"] == "2025-09-01T10:00:00+00:00"

    def test_format_includes_correlation_id(self):
        token = set_correlation_id("cid-1")
        try:
            output = json.loads(JsonFormatter().format(self._record()))
        finally:
            reset_correlation_id(token)

        assert output["correlationId"] == "cid-1"

    def test_get_logger_single_handler(self):
        logger = get_logger("lodgekeeper.test.single")
        get_logger("lodgekeeper.test.single")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False


class TestLogLevel:
    def test_default_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert _level() == logging.INFO

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert _level() == logging.DEBUG

    def test_unknown_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert _level() == logging.INFO
