"""
Tests for structured logging helpers

Tests:
1. PII redaction
2. Audit log schema
"""

from unittest.mock import MagicMock, patch

from app.shared.core.logging import audit_log, pii_redactor


class TestPiiRedactor:

    def test_redacts_top_level_fields(self):
        event = pii_redactor(None, "info", {
            "event": "login_failed",
            "email": "ada@example.com",
            "password": "secret123",
            "provider": "aws",
        })

        assert event["email"] == "[REDACTED]"
        assert event["password"] == "[REDACTED]"
        assert event["provider"] == "aws"

    def test_redacts_nested_containers(self):
        event = pii_redactor(None, "info", {
            "event": "cloud_credentials_saved",
            "metadata": {"secret_access_key": "abc", "region": "us-east-1"},
            "details": {"client_secret": "xyz"},
        })

        assert event["metadata"]["secret_access_key"] == "[REDACTED]"
        assert event["metadata"]["region"] == "us-east-1"
        assert event["details"]["client_secret"] == "[REDACTED]"


class TestAuditLog:

    def test_audit_log_emits_consistent_schema(self):
        logger = MagicMock()
        with patch("app.shared.core.logging.structlog.get_logger", return_value=logger):
            audit_log("alert_resolved", "user-1", {"alert_id": "a-1"})

        logger.info.assert_called_once_with(
            "audit_event",
            audit_event="alert_resolved",
            user_id="user-1",
            metadata={"alert_id": "a-1"},
        )
