import json
import logging

from app.core.config import settings
from app.core.logging import CustomJsonFormatter, LOG_FORMAT, SERVICE_NAME, request_id_var


def _format(message, level=logging.INFO):
    record = logging.LogRecord("app.services.payroll", level, __file__, 1, message, None, None)
    return json.loads(CustomJsonFormatter(LOG_FORMAT).format(record))


def test_record_carries_service_and_environment():
    entry = _format("Payroll generated")

    assert entry["message"] == "Payroll generated"
    assert entry["service"] == SERVICE_NAME
    assert entry["environment"] == settings.environment
    assert entry["level"] == "INFO"
    assert entry["name"] == "app.services.payroll"
    assert entry["timestamp"]
    assert "request_id" not in entry


def test_record_carries_request_id_inside_a_request():
    token = request_id_var.set("req-789")
    try:
        entry = _format("Leave approved", level=logging.WARNING)
    finally:
        request_id_var.reset(token)

    assert entry["request_id"] == "req-789"
    assert entry["level"] == "WARNING"
