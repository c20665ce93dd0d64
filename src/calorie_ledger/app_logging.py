"""Logging configuration helpers."""

import logging

LOGGER_NAME = "calorie_ledger"
LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach one stream handler to the package logger and set its level.

    Repeated calls only adjust the level. Handlers attached by other code
    are left alone.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if not any(handler.get_name() == LOGGER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(LOGGER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
