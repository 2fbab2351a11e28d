"""
Logging setup for the gym administration backend.

Every module logs through ``logging.getLogger(__name__)`` and passes
structured fields as ``extra={"context": {...}}``. This module decides how
those records are rendered:

- colored, single-line console output for development, with the context
  appended as ``key=value`` pairs
- JSON lines for production consoles and for the rotating log files
- optional SQL timing records and per-request records for Flask

Usage:
    from gym_admin.core.logging_config import setup_logging

    setup_logging(app, log_level="INFO", use_json_format=True)
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from flask import Flask, g, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

SERVICE_NAME = "gym_admin"
DEFAULT_LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5
SQL_PREVIEW_CHARS = 300


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record: the shape the log shipper expects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = _context_of(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Decimal amounts and dates are rendered with str()
        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored level names, context appended as key=value pairs."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so file handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if self.use_color:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        line = super().format(record)
        context = _context_of(record)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def _file_handlers(log_dir: Path, level: int) -> List[logging.Handler]:
    """Rotating JSON files: everything at ``level``, plus errors only."""
    targets = [
        (log_dir / "app.log", level),
        (log_dir / f"{SERVICE_NAME}_errors.log", logging.ERROR),
    ]
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers: List[logging.Handler] = []
    for path, handler_level in targets:
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        handler.setLevel(handler_level)
        handler.setFormatter(JSONFormatter())
        handlers.append(handler)
    return handlers


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Replace the root handlers with this service's console and file handlers.

    Args:
        app: Flask app; when given, every request and response is logged
        log_level: ``logging.INFO`` or a name such as ``"DEBUG"``
        enable_sql_echo: log the duration of every SQL statement
        log_to_file: add rotating JSON files under ``log_dir``
        use_json_format: JSON console output instead of colored text
        log_dir: defaults to ``backend/logs``
    """
    if isinstance(log_level, str):
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    else:
        level = log_level

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        JSONFormatter() if use_json_format else ConsoleFormatter(use_color=sys.stdout.isatty())
    )
    root.addHandler(console)

    setup_logger = logging.getLogger(__name__)
    if log_to_file:
        target = log_dir or DEFAULT_LOG_DIR
        try:
            for handler in _file_handlers(target, level):
                root.addHandler(handler)
        except OSError as e:
            log_to_file = False
            setup_logger.warning(
                "File logging disabled, console only",
                extra={"context": {"log_dir": str(target), "error": str(e)}},
            )

    if enable_sql_echo:
        _register_sql_timing()

    if app is not None:
        _register_request_logging(app)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    setup_logger.info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "sql_timing": enable_sql_echo,
                "files": log_to_file,
                "json": use_json_format,
            }
        },
    )


_SQL_TIMING_REGISTERED = False


def _register_sql_timing() -> None:
    global _SQL_TIMING_REGISTERED
    if _SQL_TIMING_REGISTERED:
        return
    _SQL_TIMING_REGISTERED = True
    sql_logger = logging.getLogger("gym_admin.sql")

    @event.listens_for(Engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("gym_admin_query_start", []).append(time.perf_counter())

    @event.listens_for(Engine, "after_cursor_execute")
    def _log_duration(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["gym_admin_query_start"].pop()
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        sql_logger.debug(
            f"SQL {elapsed_ms}ms",
            extra={
                "context": {
                    "statement": " ".join(statement.split())[:SQL_PREVIEW_CHARS],
                    "duration_ms": elapsed_ms,
                }
            },
        )


def _register_request_logging(app: Flask) -> None:
    http_logger = logging.getLogger("gym_admin.http")

    @app.before_request
    def _log_request():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_started = time.perf_counter()
        http_logger.info(
            f"-> {request.method} {request.path}",
            extra={
                "context": {
                    "request_id": g.request_id,
                    "endpoint": request.endpoint,
                    "remote_addr": request.remote_addr,
                }
            },
        )

    @app.after_request
    def _log_response(response):
        started = g.get("request_started")
        if started is not None:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            http_logger.info(
                f"<- {request.method} {request.path} {response.status_code}",
                extra={
                    "context": {
                        "request_id": g.get("request_id"),
                        "status": response.status_code,
                        "duration_ms": elapsed_ms,
                    }
                },
            )
        return response
