from __future__ import annotations

import logging
from io import StringIO

import shiftmark.logging.init as log_init
from shiftmark.logging.init import LabeledFormatter, get_logger, log_summary, setup_logging


def _capture() -> tuple[logging.Logger, StringIO]:
    """Install a LabeledFormatter handler writing into a StringIO."""
    captured = StringIO()
    logger = setup_logging()
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    return logger, captured


def test_setup_logging_creates_package_logger():
    logger = setup_logging()
    assert logger.name == "shiftmark"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_setup_logging_debug_lowers_level():
    logger = setup_logging()
    setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_get_logger_configures_on_first_use():
    log_init.reset_logging()
    logger = get_logger()
    assert logger is setup_logging()


def test_logging_labeled_prefixes():
    logger, captured = _capture()
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    log_summary("rosters=1 keys=2")
    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY rosters=1 keys=2",
    ]


def test_module_loggers_share_package_handler():
    _, captured = _capture()
    logging.getLogger("shiftmark.services.orchestrator").info("from child")
    assert captured.getvalue() == "INFO from child\n"


def test_exception_traceback_included():
    logger, captured = _capture()
    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception("failed")
    out = captured.getvalue()
    assert out.startswith("ERROR failed\n")
    assert "ValueError: boom" in out
