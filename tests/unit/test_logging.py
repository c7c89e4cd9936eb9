"""
Unit Tests - Logging Configuration
"""
import logging

from structlog.stdlib import ProcessorFormatter

from backoffice.config.logging import (
    REDACTED,
    configure_logging,
    redact_credentials,
    resolve_level,
    service_context,
)
from backoffice.config.settings import MonitoringSettings, Settings


class TestLoggingProcessors:
    """Tests for the service-specific structlog processors"""

    def test_credentials_are_masked(self):
        event = {
            "event": "Logged in",
            "password": "secret",
            "refreshToken": "r-1",
            "payload": {"token": "t-1", "email": "ops@example.com"},
            "user_id": "u1",
        }

        result = redact_credentials(None, "info", event)

        assert result["password"] == REDACTED
        assert result["refreshToken"] == REDACTED
        assert result["payload"] == {"token": REDACTED, "email": "ops@example.com"}
        assert result["user_id"] == "u1"

    def test_missing_token_is_left_alone(self):
        result = redact_credentials(None, "info", {"event": "x", "token": None})

        assert result["token"] is None

    def test_service_context(self, test_settings):
        add_service = service_context(test_settings)

        result = add_service(None, "info", {"event": "x"})

        assert result["service"] == "backoffice"
        assert result["environment"] == "testing"

    def test_resolve_level(self):
        quiet = Settings(APP_ENV="testing", DEBUG=False, monitoring=MonitoringSettings(LOG_LEVEL="WARNING"))
        debug = Settings(APP_ENV="testing", DEBUG=True)

        assert resolve_level(quiet) == logging.WARNING
        assert resolve_level(debug) == logging.DEBUG
        assert resolve_level(debug, "error") == logging.ERROR


class TestConfigureLogging:
    """Tests for root logger wiring"""

    def test_single_structured_handler(self):
        configure_logging("INFO")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, ProcessorFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
