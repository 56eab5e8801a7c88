"""Tests for logger configuration."""

import json
import logging

import pytest

from vestledger.core.logging import LOGGER_NAME, configure_logging, get_logger


@pytest.fixture
def restore_logger():
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()


def test_child_loggers_share_namespace():
    assert get_logger("ledger").name == "vestledger.ledger"
    assert get_logger().name == "vestledger"


def test_reconfiguring_keeps_one_handler(restore_logger):
    configure_logging("DEBUG")
    logger = configure_logging("WARNING")

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    assert logger.propagate is False


def test_json_lines_escape_message_text(restore_logger, capsys):
    configure_logging("INFO", json_format=True)

    get_logger("ledger").info('Released 5 "TOKEN" to alice\nnext line')

    line = capsys.readouterr().out.strip()
    record = json.loads(line)
    assert record["message"] == 'Released 5 "TOKEN" to alice\nnext line'
    assert record["levelname"] == "INFO"
    assert record["name"] == "vestledger.ledger"
