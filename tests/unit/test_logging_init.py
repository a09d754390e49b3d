from __future__ import annotations

import logging
from io import StringIO

from sheetmigrate.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_is_idempotent(clean_logging):
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert setup_logging() is logger
    assert get_logger() is logger


def test_labeled_prefixes():
    stream = StringIO()
    logger = logging.getLogger("test_sheetmigrate_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("info message")
    logger.warning("warn message")
    logger.error("error message")
    logger.log(SUMMARY_LEVEL, "status=success")

    assert stream.getvalue().splitlines() == [
        "INFO info message",
        "WARN warn message",
        "ERROR error message",
        "SUMMARY status=success",
    ]


def test_child_module_loggers_reach_app_handler(clean_logging, capsys):
    setup_logging()
    logging.getLogger("sheetmigrate.services.orchestrator").info("from child")
    log_summary("done")
    out = capsys.readouterr().out
    assert "INFO from child" in out
    assert "SUMMARY done" in out


def test_enable_debug(clean_logging, capsys):
    setup_logging()
    enable_debug()
    logging.getLogger("sheetmigrate.db.store").debug("sql: SELECT 1")
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG sql: SELECT 1" in out
