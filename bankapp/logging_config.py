"""
Logging configuration for the ledger API.

Every module logs through ``logging.getLogger(__name__)``, so all records
land under the ``bankapp`` logger hierarchy. ``setup_logging`` is called once
from the application lifespan and attaches a single console handler.

Levels used across the codebase:
  - INFO:     completed money movements, account openings, admin changes
  - WARNING:  rejected requests (feature off, transfers disabled, no funds)
  - ERROR:    storage failures that were rolled back cleanly
  - CRITICAL: partial failures that need an operator
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "bankapp"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the ``bankapp`` logger.

    Safe to call more than once: existing handlers are replaced rather than
    stacked, so reloads under ``uvicorn --reload`` don't duplicate lines.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)

    # SQL statements are only interesting in DEBUG mode (engine echo handles that)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger
