"""JSON log formatter."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# record attribute -> key in the "encode" object
_ENCODE_FIELDS = {
    "worker_id": "worker",
    "output_id": "output",
    "encode_pass": "pass",
    "file_path": "file",
}

# extra={...} keys set by ProcessRunner
_PROCESS_FIELDS = ("command", "arg_count", "return_code", "elapsed_seconds")


def _collect(record: logging.LogRecord, fields: dict[str, str]) -> dict[str, Any]:
    values = {}
    for attr, key in fields.items():
        value = getattr(record, attr, None)
        if value is not None:
            values[key] = value
    return values


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Always has timestamp (ISO-8601 UTC), level, logger and message. Records
    from inside an encode worker add an "encode" object with worker, output,
    pass and file. Tool invocations add a "process" object with the command
    name and either its argument count or its return code and elapsed time.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        encode = _collect(record, _ENCODE_FIELDS)
        if encode:
            entry["encode"] = encode

        process = _collect(record, {field: field for field in _PROCESS_FIELDS})
        if process:
            entry["process"] = process

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
