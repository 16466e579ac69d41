"""
depdoctor Logging

Thin wrapper around the standard ``logging`` module that accepts keyword
context and stamps every record with the id of the current analysis run.

Usage:
    from depdoctor_common.logger import get_logger, set_run_id

    logger = get_logger(__name__)
    set_run_id("3f2a")
    logger.info("Loaded dependency graph", artifacts=12, edges=30)
    # -> ... INFO depdoctor_sdk.core [run=3f2a] Loaded dependency graph artifacts=12 edges=30
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

_run_id: ContextVar[Optional[str]] = ContextVar("depdoctor_run_id", default=None)

_ROOT_LOGGER = "depdoctor"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s%(run_tag)s %(message)s"


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set the run id for the current context, generating one if omitted."""
    value = run_id or uuid.uuid4().hex[:12]
    _run_id.set(value)
    return value


def get_run_id() -> Optional[str]:
    """Get the run id of the current context."""
    return _run_id.get()


def clear_run_id() -> None:
    """Clear the run id of the current context."""
    _run_id.set(None)


class _RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        run_id = get_run_id()
        record.run_id = run_id
        record.run_tag = f" [run={run_id}]" if run_id else ""
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if getattr(record, "run_id", None):
            payload["run_id"] = record.run_id
        payload.update(getattr(record, "context", {}) or {})
        return json.dumps(payload, default=str)


class DepdoctorLogger:
    """
    Logger that accepts structured keyword context.

    Context is appended to text messages as ``key=value`` pairs and emitted as
    separate fields by the JSON formatter.
    """

    def __init__(self, name: str):
        self.name = name
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, context: Dict[str, Any], exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        text = message
        if context:
            text += " " + " ".join(f"{k}={v}" for k, v in context.items())
        self._logger.log(level, text, exc_info=exc_info, extra={"context": context})

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, context)

    def exception(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, context, exc_info=True)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)


def get_logger(name: str) -> DepdoctorLogger:
    """
    Get a depdoctor logger.

    Names outside the ``depdoctor`` hierarchy (module names such as
    ``depdoctor_sdk.core``) are nested under it so one handler covers them all.
    """
    if not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return DepdoctorLogger(name)


def configure_logging(
    level: str = "warning",
    json_format: bool = False,
    stream: Any = None,
) -> logging.Logger:
    """
    Configure the depdoctor logger hierarchy.

    Replaces any handler installed by a previous call, so it is safe to call
    once per CLI invocation.

    Args:
        level: Log level name (debug, info, warning, error)
        json_format: Emit one JSON object per line instead of text
        stream: Target stream (defaults to stderr)

    Returns:
        The configured root depdoctor logger
    """
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(_RunIdFilter())
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)
    return root
