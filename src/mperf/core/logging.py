"""Logging configuration for mperf."""

import contextvars
import json
import logging
import os
import socket
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

# Context variable for storing the object path of the upload being handled
object_path_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "object_path", default=None
)

# Standard LogRecord attributes that are not copied as extra fields
_RESERVED_FIELDS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "getMessage", "taskName",
})

# Numeric levels used by bunyan-style log tooling
LEVEL_MAP = {
    logging.DEBUG: 20,
    logging.INFO: 30,
    logging.WARNING: 40,
    logging.ERROR: 50,
    logging.CRITICAL: 60,
}


class JsonLogFormatter(logging.Formatter):
    """Formats log records as single-line bunyan-style JSON.

    Each entry carries ``name`` (the service), ``hostname``, ``pid``, a
    numeric ``level``, ``msg``, ``time`` and ``v`` so runs from several load
    generator hosts can be merged and filtered with bunyan tooling. The
    emitting module goes in ``component``. Extra fields passed with
    ``logger.info(..., extra={...})`` are merged into the top level; an
    exception goes into an ``err`` object.
    """

    def __init__(self, service_name: str = "mperf"):
        super().__init__()
        self.service_name = service_name
        self.hostname = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "name": self.service_name,
            "hostname": self.hostname,
            "pid": record.process or os.getpid(),
            "component": record.name,
            "level": LEVEL_MAP.get(record.levelno, record.levelno),
            "msg": record.getMessage(),
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "v": 0,
        }

        object_path = object_path_context.get()
        if object_path:
            log_entry["object_path"] = object_path

        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0]:
            log_entry["err"] = {
                "name": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stack": "".join(traceback.format_exception(*record.exc_info)),
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "DEBUG", fmt: str = "text", service_name: str = "mperf") -> None:
    """Configure logging for a run.

    Logs go to stdout. ``fmt`` selects a plain text format for interactive
    use or single-line JSON for log collectors.

    Args:
        level: Log level name (e.g. "DEBUG", "INFO")
        fmt: Either "text" or "json"
        service_name: Value of the ``name`` field in JSON entries
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.DEBUG

    handler = logging.StreamHandler(sys.stdout)

    if fmt == "json":
        formatter: logging.Formatter = JsonLogFormatter(service_name)
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # The storage SDK is chatty at DEBUG
    for logger_name in ["google", "urllib3"]:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.INFO))
