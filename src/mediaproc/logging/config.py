"""Logging setup for the mediaproc package logger.

configure_logging() attaches handlers to the "mediaproc" logger only, so
an embedding application keeps control of the root logger.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from mediaproc.logging.context import WorkerContextFilter
from mediaproc.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from mediaproc.config.models import LoggingConfig

PACKAGE_LOGGER = "mediaproc"

TEXT_FORMAT = "%(asctime)s - %(worker_tag)s%(name)s - %(levelname)s - %(message)s"


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")


def _file_handler(config: LoggingConfig) -> logging.Handler:
    assert config.file is not None
    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Configure the mediaproc logger from config.

    Logs to a rotating file when config.file is set, and to stderr when
    include_stderr is set or there is no usable file. Calling it again
    replaces the handlers from the previous call.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(config.level.upper())
    package_logger.propagate = False
    for old in package_logger.handlers[:]:
        package_logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = []
    file_error: OSError | None = None
    if config.file is not None:
        try:
            handlers.append(_file_handler(config))
        except OSError as e:
            file_error = e
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = build_formatter(config.format)
    context_filter = WorkerContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        package_logger.addHandler(handler)

    if file_error is not None:
        package_logger.warning(
            "Could not open log file %s, logging to stderr: %s",
            config.file,
            file_error,
        )
    return package_logger
