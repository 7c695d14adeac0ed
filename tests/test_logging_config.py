"""Tests for the logging setup."""

import logging

from bankapp.logging_config import LOG_FORMAT, ROOT_LOGGER_NAME, setup_logging


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    setup_logging("DEBUG")
    try:
        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_unknown_level_falls_back_to_info():
    logger = setup_logging("chatty")
    try:
        assert logger.level == logging.INFO
    finally:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
