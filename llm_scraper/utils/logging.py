"""Logging setup for the llm-scraper CLI and scripts.

Module loggers are created with ``logging.getLogger(__name__)`` and live
under ``llm_scraper``; ``configure_logging`` gives that tree one stderr
handler and keeps the HTTP and provider libraries quiet unless debugging.
"""

import logging
import sys

LOGGER_NAME = "llm_scraper"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO: one line per request or retry.
THIRD_PARTY_LOGGERS = ("LiteLLM", "LiteLLM Router", "httpx", "httpcore")


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure the ``llm_scraper`` logger and return it.

    Safe to call repeatedly: the handler is installed once and only its
    level changes afterwards.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to INFO.

    Returns:
        The application logger.
    """
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "_llm_scraper_handler", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._llm_scraper_handler = True
        logger.addHandler(handler)
        # litellm installs its own handlers on the root logger
        logger.propagate = False
    handler.setLevel(log_level)

    third_party_level = log_level if log_level <= logging.DEBUG else max(
        log_level, logging.WARNING
    )
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return logger


def reset_logging() -> None:
    """Undo configure_logging (used by tests)."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_llm_scraper_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
