"""Structured JSON logging for production observability"""

import logging
import sys
from typing import Any, Dict, Optional, TextIO

from pythonjsonlogger import jsonlogger

from demo_bank.utils.date_utils import utcnow


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with a UTC timestamp, level and service name"""

    def __init__(self, *args: Any, service_name: str = "demo-bank", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "demo-bank", stream: Optional[TextIO] = None) -> None:
    """Route all records through one JSON handler on stdout, replacing any handlers already installed"""
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name))
    root.addHandler(handler)

    # uvicorn installs its own handlers; send its records through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True


def log_ledger_operation(
    request_id: str,
    account_id: int,
    operation: str,
    amount_cents: Optional[int],
    outcome: str,
    duration_ms: float,
) -> None:
    """Log structured ledger outcome for analysis"""
    logging.info(
        "Ledger operation completed",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "ledger_" + operation,
            "operation": operation,
            "amount_cents": amount_cents,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )
