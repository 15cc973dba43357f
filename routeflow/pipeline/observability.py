"""
Observability for Routeflow runs.

Structured JSON logging on top of the stdlib ``logging`` module, plus a
RunLogger with one method per run lifecycle event.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


# =============================================================================
# Log Levels
# =============================================================================


class LogLevel(Enum):
    """Standard log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# =============================================================================
# Structured Logger Protocol
# =============================================================================


class StructuredLogger(Protocol):
    """Logger that takes a message plus key-value context."""

    def debug(self, message: str, **context: Any) -> None:
        ...

    def info(self, message: str, **context: Any) -> None:
        ...

    def warning(self, message: str, **context: Any) -> None:
        ...

    def error(self, message: str, **context: Any) -> None:
        ...


# =============================================================================
# JSON Logger Implementation
# =============================================================================


@dataclass
class JSONLogger:
    """
    Structured logger that outputs JSON-formatted logs.

    Example output:
        {"timestamp": "2026-01-02T10:30:00Z", "level": "info",
         "message": "Run routed", "run_id": "abc-123", "route": "zipcode"}
    """

    name: str = "routeflow"
    run_id: str | None = None
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
        if self.run_id:
            record["run_id"] = self.run_id

        getattr(self._python_logger, level.value)(json.dumps(record, default=str))

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(LogLevel.ERROR, message, context)

    def with_context(self, **extra: Any) -> JSONLogger:
        """Create a new logger with additional context."""
        return JSONLogger(
            name=self.name,
            run_id=self.run_id,
            extra_context={**self.extra_context, **extra},
        )


# =============================================================================
# Run Logger
# =============================================================================


@dataclass
class RunLogger:
    """
    Specialized logger for run execution.

    Example:
        log = RunLogger(run_id="abc-123")
        log.run_started(agent="Satoshi", thread="t-1", input_length=31)
        log.routed(route="zipcode", via="semantic", score=0.91)
        log.node_completed(node="World Zipcode Finder", node_type="plugin",
                           duration_ms=120.5, output_length=42)
        log.run_completed(state="completed", duration_ms=300.0, output_length=42)
    """

    run_id: str
    inner: StructuredLogger = field(default_factory=JSONLogger)

    def __post_init__(self) -> None:
        if isinstance(self.inner, JSONLogger):
            self.inner = JSONLogger(name="routeflow.runs", run_id=self.run_id)

    def run_started(self, agent: str, thread: str, input_length: int) -> None:
        self.inner.info("Run started", agent=agent, thread=thread, input_length=input_length)

    def routed(self, route: str, via: str, score: float | None = None) -> None:
        self.inner.info(
            "Run routed",
            route=route,
            via=via,
            score=round(score, 4) if score is not None else None,
        )

    def short_circuited(self, route: str) -> None:
        self.inner.info("Run short-circuited with canned response", route=route)

    def flow_resolved(self, flow: str, nodes: list[str]) -> None:
        self.inner.info("Flow resolved", flow=flow, nodes=nodes, node_count=len(nodes))

    def node_completed(self, node: str, node_type: str, duration_ms: float, output_length: int) -> None:
        self.inner.debug(
            "Node completed",
            node=node,
            node_type=node_type,
            duration_ms=round(duration_ms, 2),
            output_length=output_length,
        )

    def run_completed(self, state: str, duration_ms: float, output_length: int) -> None:
        self.inner.info(
            "Run completed",
            state=state,
            duration_ms=round(duration_ms, 2),
            output_length=output_length,
        )

    def run_failed(self, error: str, error_type: str, duration_ms: float, node: str | None = None) -> None:
        self.inner.error(
            "Run failed",
            error=error,
            error_type=error_type,
            node=node,
            duration_ms=round(duration_ms, 2),
        )

    def run_cancelled(self, stage: str, duration_ms: float) -> None:
        self.inner.info("Run cancelled", stage=stage, duration_ms=round(duration_ms, 2))


# =============================================================================
# Root logging setup
# =============================================================================


class _JSONFormatter(logging.Formatter):
    """Wraps plain records as JSON; records that already are JSON pass through."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if message.startswith("{"):
            return message
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": message,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure the root logger for the service."""
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


__all__ = [
    "JSONLogger",
    "LogLevel",
    "RunLogger",
    "StructuredLogger",
    "configure_logging",
]
