"""
Logging configuration for the juice bot application.

Usage:
    from juice_bot.logging_config import setup_logging
    setup_logging()  # Call once at application startup

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
    PARSER_TRACE: "true" logs every parsed line (rule matched, lines skipped)
                  at DEBUG without lowering the rest of the application
"""
import logging
import os
import sys

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PARSER_LOGGER = "juice_bot.parsing"


def setup_logging(level: str = None, parser_trace: bool = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, reads from LOG_LEVEL env var, defaults to INFO.
        parser_trace: Force DEBUG on the parser loggers. If not provided,
               reads PARSER_TRACE.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "INFO"

    if parser_trace is None:
        parser_trace = os.getenv("PARSER_TRACE", "false").lower() == "true"

    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
    )

    logging.getLogger("juice_bot").setLevel(numeric_level)
    logging.getLogger(PARSER_LOGGER).setLevel(logging.DEBUG if parser_trace else numeric_level)

    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured at %s level (parser trace: %s)", level, parser_trace)
