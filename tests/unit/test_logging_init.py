from __future__ import annotations

import logging

from gensetdesk.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert len(second.handlers) == 1


def test_reset_then_setup_does_not_duplicate_handlers():
    setup_logging()
    reset_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1


def test_labels(capsys):
    logger = setup_logging()
    logger.info("hello")
    logger.warning("careful")
    logger.error("broken")
    log_summary("rows=1")
    out = capsys.readouterr().out.splitlines()
    assert out == ["INFO hello", "WARN careful", "ERROR broken", "SUMMARY rows=1"]


def test_module_loggers_share_the_handler(capsys):
    setup_logging()
    logging.getLogger("gensetdesk.services.import_service").warning("draft rejected")
    assert capsys.readouterr().out == "WARN draft rejected\n"


def test_debug_toggle(capsys):
    logger = get_logger()
    logger.debug("hidden")
    set_debug(True)
    logger.debug("shown")
    set_debug(False)
    logger.debug("hidden again")
    assert capsys.readouterr().out == "DEBUG shown\n"


def test_summary_level_sits_between_info_and_warning():
    assert logging.INFO < SUMMARY_LEVEL < logging.WARNING
    setup_logging()
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"
