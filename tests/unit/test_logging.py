"""Unit tests for structured JSON logging"""

import io
import json
import logging

import pytest

from demo_bank.infrastructure.observability.logging import CustomJsonFormatter, setup_logging


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("demo_bank.test", logging.WARNING, __file__, 1, message, None, None)


def test_formatter_stamps_service_level_and_timestamp():
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name="bank-eu")

    payload = json.loads(formatter.format(_record()))

    assert payload["service"] == "bank-eu"
    assert payload["level"] == "WARNING"
    assert payload["message"] == "hello"
    assert payload["name"] == "demo_bank.test"
    assert payload["timestamp"]


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_installs_single_json_handler(restore_root_logger):
    stream = io.StringIO()

    setup_logging("debug", service_name="bank-test", stream=stream)
    logging.getLogger("demo_bank.ledger").info("Deposit applied", extra={"account_id": 7})

    root = restore_root_logger
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
    payload = json.loads(stream.getvalue().strip())
    assert payload["service"] == "bank-test"
    assert payload["account_id"] == 7
