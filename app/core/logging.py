"""
Structured logging for the leave and payroll engine.

Every record is one JSON object carrying the service name, the deployment
environment and, inside a request, the correlation ID set by
``CorrelationIdMiddleware``. Ledger and payroll batch messages rely on that
ID to be traced back to the HTTP call that triggered them.
"""
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from app.core.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

SERVICE_NAME = "hr-leave-payroll"
LOG_FORMAT = "%(timestamp) %(level) %(name) %(message)"
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id

        log_record.setdefault("service", SERVICE_NAME)
        log_record.setdefault("environment", settings.environment)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = (log_record.get("level") or record.levelname).upper()


def setup_logging(level: int = logging.INFO):
    """Attach the JSON handler to the root logger once."""
    root = logging.getLogger()
    if any(isinstance(h.formatter, CustomJsonFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(CustomJsonFormatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
