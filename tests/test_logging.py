"""
Tests for structured logging, masking and audit records.
"""

import json
import logging

import pytest

from thrive.observability.logging import (
    AuditLogger,
    HumanFormatter,
    JSONFormatter,
    configure_logging,
    get_log_context,
    log_context,
    mask_sensitive_data,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord("thrive.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestMasking:
    def test_sensitive_keys(self):
        masked = mask_sensitive_data(
            {"password": "hunter2", "email": "a@b.c", "nested": {"api_key": "k"}, "count": 3}
        )
        assert masked == {
            "password": "[REDACTED]",
            "email": "[REDACTED]",
            "nested": {"api_key": "[REDACTED]"},
            "count": 3,
        }

    def test_token_like_strings(self):
        assert mask_sensitive_data("SG.abcdefghijklmnopqrstuvwxyz") == "SG.abcde...[REDACTED]"
        assert mask_sensitive_data("short") == "short"

    def test_max_depth(self):
        assert mask_sensitive_data({"a": 1}, depth=11) == "[MAX_DEPTH_EXCEEDED]"


class TestLogContext:
    def test_scoped_binding(self):
        with log_context(run_id="run-123", user_id=7):
            assert get_log_context()["run_id"] == "run-123"
            assert get_log_context()["user_id"] == "7"
        assert get_log_context()["run_id"] is None

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            with log_context(tenant="x"):
                pass


class TestFormatters:
    def test_json_includes_context_and_masked_extra(self):
        with log_context(run_id="run-abc"):
            line = JSONFormatter().format(make_record(email="a@b.c", users=2))

        data = json.loads(line)
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["run_id"] == "run-abc"
        assert data["extra"] == {"email": "[REDACTED]", "users": 2}

    def test_human_format(self):
        with log_context(run_id="abcdef123456"):
            line = HumanFormatter(use_colors=False).format(make_record("cleanup done"))
        assert "run=abcdef12" in line
        assert line.endswith("cleanup done")


class TestAuditLogger:
    def test_audit_record(self, caplog):
        with caplog.at_level(logging.INFO, logger="thrive.audit"):
            AuditLogger().log(
                "demo_cleanup",
                "demo_users",
                resource_id="run-1",
                details={"users_deactivated": 2, "email": "x@y.z"},
            )

        record = caplog.records[-1]
        assert record.getMessage() == "AUDIT: demo_cleanup demo_users"
        assert record.audit_event is True
        assert record.details == {"users_deactivated": 2, "email": "[REDACTED]"}


class TestConfiguration:
    def test_configure_human_format(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configured = configure_logging(level="debug", format="human", use_colors=False)
            assert configured.level == logging.DEBUG
            assert len(configured.handlers) == 1
            assert isinstance(configured.handlers[0].formatter, HumanFormatter)
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
