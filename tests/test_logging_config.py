# tests/test_logging_config.py
import logging

import pytest

from cmdexec import disable_logging, get_log_file_path, setup_logging
from cmdexec.logging_config import LOGGER_NAME


pytestmark = pytest.mark.usefixtures("restore_logging")


def test_setup_logging_console_only():
    logger = setup_logging(level="debug", propagate=False)
    assert logger.name == "cmdexec"
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert get_log_file_path() is None


def test_setup_logging_to_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging(level=logging.INFO, file=log_file, console=False)
    logging.getLogger("cmdexec.command_orchestrator").info("hello file")

    assert get_log_file_path() == log_file.resolve()
    assert "hello file" in log_file.read_text()


def test_repeated_setup_replaces_handlers():
    disable_logging()
    logger = logging.getLogger(LOGGER_NAME)
    before = len(logger.handlers)
    setup_logging()
    setup_logging()
    assert len(logger.handlers) == before + 1


def test_disable_logging_silences():
    setup_logging(level="DEBUG")
    disable_logging()
    logger = logging.getLogger(LOGGER_NAME)
    assert not logger.isEnabledFor(logging.CRITICAL)
    assert get_log_file_path() is None
