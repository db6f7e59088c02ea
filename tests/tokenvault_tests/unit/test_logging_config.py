import io
import json
import logging

import pytest

from tokenvault.core.logging_config import get_logger, setup_logging


@pytest.fixture
def cleanup_logger():
    names = []
    yield names
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def test_setup_logging_emits_json(cleanup_logger):
    cleanup_logger.append("tokenvault.test_json")
    stream = io.StringIO()
    logger = setup_logging(
        name="tokenvault.test_json",
        level="INFO",
        environment="staging",
        stream=stream,
    )

    logger.info("Deposit accepted", extra={"event": "custody.deposit", "amount": 1000})

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["message"] == "Deposit accepted"
    assert record["event"] == "custody.deposit"
    assert record["amount"] == 1000
    assert record["environment"] == "staging"
    assert record["service"] == "tokenvault"
    assert record["level"] == "info"
    assert record["source"]["function"] == "test_setup_logging_emits_json"
    assert record["timestamp"]


def test_setup_logging_writes_file_and_replaces_handlers(cleanup_logger, tmp_path):
    cleanup_logger.append("tokenvault.test_file")
    log_file = tmp_path / "nested" / "vault.json"

    setup_logging(name="tokenvault.test_file", log_file=str(log_file), enable_console=False)
    logger = setup_logging(name="tokenvault.test_file", log_file=str(log_file), enable_console=False)
    logger.warning("Lock extended")

    assert len(logger.handlers) == 1
    lines = log_file.read_text(encoding="utf-8").strip().splitlines()
    assert json.loads(lines[-1])["message"] == "Lock extended"


def test_get_logger_reuses_configuration(cleanup_logger):
    cleanup_logger.append("tokenvault.test_get")
    first = get_logger("tokenvault.test_get")
    second = get_logger("tokenvault.test_get")
    assert first is second
    assert len(second.handlers) == 1
