"""Structured logging for mediaproc.

Text or JSON output on the "mediaproc" logger, with records from encode
workers tagged by worker, output and pass.
"""

from mediaproc.logging.config import configure_logging
from mediaproc.logging.context import (
    EncodeLogContext,
    WorkerContextFilter,
    current_context,
    get_encode_pass,
    get_worker_context,
    pass_context,
    worker_context,
)
from mediaproc.logging.handlers import JSONFormatter

__all__ = [
    "EncodeLogContext",
    "JSONFormatter",
    "WorkerContextFilter",
    "configure_logging",
    "current_context",
    "get_encode_pass",
    "get_worker_context",
    "pass_context",
    "worker_context",
]
