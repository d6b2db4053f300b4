"""
Logging for durable_ai.

- init_logging(): process-wide latch that configures the package logger once
- JSONLogger: structured key-value logging on top of stdlib logging
- DurabilityLogger: convenience events for durable calls and streams

Log level is read from DURABLE_AI_LOG (debug, info, warning, error).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "DURABLE_AI_LOG"
PACKAGE_LOGGER = "durable_ai"

_logging_initialized = False


def init_logging() -> None:
    """
    Configure the package logger on first call; later calls do nothing.

    Every durable entry point calls this, so hosts get logging without
    explicit setup.
    """
    global _logging_initialized
    if _logging_initialized:
        return

    level_name = os.environ.get(LOG_LEVEL_ENV, "").upper()
    level = logging.getLevelName(level_name) if level_name else logging.INFO
    if not isinstance(level, int):
        level = logging.INFO

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        package_logger.addHandler(handler)

    _logging_initialized = True


def reset_logging() -> None:
    """Clear the initialization latch (for testing)."""
    global _logging_initialized
    _logging_initialized = False


def is_logging_initialized() -> bool:
    return _logging_initialized


# =============================================================================
# Structured logging
# =============================================================================


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class JSONLogger:
    """
    Structured logger that outputs JSON-formatted log lines.

    Example output:
        {"timestamp": "2026-01-02T10:30:00Z", "level": "info",
         "message": "Durable call replayed", "operation": "durable_llm.send"}
    """

    name: str = PACKAGE_LOGGER
    extra_context: dict[str, Any] = field(default_factory=dict)
    _python_logger: logging.Logger | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._python_logger = logging.getLogger(self.name)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.value,
            "message": message,
            **self.extra_context,
            **context,
        }
        log_method = getattr(self._python_logger, level.value)
        log_method(json.dumps(record, default=str))

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(LogLevel.ERROR, message, context)

    def with_context(self, **extra: Any) -> JSONLogger:
        return JSONLogger(name=self.name, extra_context={**self.extra_context, **extra})


@dataclass
class DurabilityLogger:
    """
    Events emitted by the durable wrappers.

    Example:
        log = DurabilityLogger(operation="durable_llm.send")
        log.call_live(ok=True)
        log.call_replayed(ok=True)
    """

    operation: str
    inner: JSONLogger = field(default_factory=lambda: JSONLogger(name=f"{PACKAGE_LOGGER}.durability"))

    def call_live(self, ok: bool, error_kind: str | None = None) -> None:
        self.inner.debug(
            "Durable call executed",
            operation=self.operation,
            mode="live",
            ok=ok,
            error_kind=error_kind,
        )

    def call_replayed(self, ok: bool) -> None:
        self.inner.debug("Durable call replayed", operation=self.operation, mode="replay", ok=ok)

    def stream_resumed(self, partial_count: int, pollables: int) -> None:
        self.inner.info(
            "Durable stream resumed with continuation",
            operation=self.operation,
            partial_count=partial_count,
            pollables=pollables,
        )

    def stream_finished_on_replay(self) -> None:
        self.inner.debug("Durable stream finished during replay", operation=self.operation)


__all__ = [
    "DurabilityLogger",
    "JSONLogger",
    "LOG_LEVEL_ENV",
    "LogLevel",
    "init_logging",
    "is_logging_initialized",
    "reset_logging",
]
