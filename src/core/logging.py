"""
Logging configuration for the PR Requirement Reviewer.
"""

import re
import sys
from typing import Optional

from loguru import logger

from src.config import settings

_CREDENTIALS = re.compile(r"(https?://)[^/@\s]+@")


def redact(text: str) -> str:
    """Strip credentials embedded in URLs."""
    return _CREDENTIALS.sub(r"\1***@", text)


def _redact_record(record: dict) -> None:
    # Clone URLs carry the GitHub token
    record["message"] = redact(record["message"])


def configure_logging() -> None:
    """Configure logging for the application."""

    logger.remove()
    logger.configure(extra={"logger_name": "app"}, patcher=_redact_record)

    log_level = "DEBUG" if settings.debug else "INFO"

    if settings.environment == "development":
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[logger_name]}</cyan> - "
                "<level>{message}</level>"
            ),
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=settings.debug,
        )
    else:
        # Structured records for the log collector
        logger.add(sys.stderr, level=log_level, serialize=True)


configure_logging()


def get_logger(name: Optional[str] = None):
    """Get a logger instance with optional name binding."""
    if name:
        return logger.bind(logger_name=name)
    return logger
