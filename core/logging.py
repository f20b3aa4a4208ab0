# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across all components
# CREATED: 14 OCT 2026
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Every record carries the active LogContext (data model, principal,
operation). Output is JSON when LOG_FORMAT=json, one readable line
otherwise.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("services.schema")

    with log_context(data_model_id=42, operation="replace_schema"):
        logger.info("Replacing schema", extra={"entity_count": 5})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    API = "api"
    SERVICE = "service"
    REPOSITORY = "repository"
    SDL = "sdl"


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside a log_context() block."""
    data_model_id: Optional[int] = None
    principal_id: Optional[str] = None
    correlation_id: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def merged(self, extra: Optional[Dict[str, Any]] = None, **fields) -> "LogContext":
        return replace(self, extra={**self.extra, **(extra or {})}, **fields)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with extra flattened in."""
        data = {k: v for k, v in asdict(self).items() if v is not None and k != "extra"}
        data.update(self.extra)
        return data


# One context per task; asyncio copies it when a task is created
_current: ContextVar[LogContext] = ContextVar("log_context", default=LogContext())


def get_current_context() -> LogContext:
    return _current.get()


@contextmanager
def log_context(**fields):
    """
    Layer fields over the current context for the duration of the block.

    Example:
        with log_context(data_model_id=7, principal_id="user-1"):
            logger.info("Saving schema")
    """
    token = _current.set(_current.get().merged(**fields))
    try:
        yield _current.get()
    finally:
        _current.reset(token)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _record_data(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    # ContextLogger stores everything under a single "extra" attribute
    return getattr(record, "extra", None) or None


# ============================================================================
# FORMATTERS
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_current_context().to_dict()
        if context:
            entry["context"] = context
        data = _record_data(record)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable single line with the context inline, for development."""

    LABELS = (
        ("data_model_id", "model"),
        ("principal_id", "principal"),
        ("operation", "op"),
    )

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = [
            f"{label}={getattr(context, attr)}"
            for attr, label in self.LABELS
            if getattr(context, attr) not in (None, "")
        ]

        line = (
            f"{datetime.now(timezone.utc):%Y-%m-%d %H:%M:%S} {record.levelname:<8} {record.name}"
            f"{' [' + ', '.join(tags) + ']' if tags else ''}: {record.getMessage()}"
        )
        data = _record_data(record)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter that copies the current context into each record."""

    def process(self, msg, kwargs):
        data = {**(kwargs.get("extra") or {}), **get_current_context().to_dict()}
        component = self.extra.get("component") if self.extra else None
        if component is not None:
            data.setdefault("component", component.value)
        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of readable lines. LOG_FORMAT=json
            in the environment has the same effect.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

CHECKPOINT_CONTEXT = ("data_model_id", "principal_id", "correlation_id")


def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named marker, e.g. "schema_replace_committed".

    Checkpoints are queryable by name to trace a schema save end to end.
    """
    context = get_current_context()
    entry: Dict[str, Any] = {"checkpoint": name, "timestamp": _utc_timestamp()}
    entry.update(
        (key, getattr(context, key))
        for key in CHECKPOINT_CONTEXT
        if getattr(context, key) not in (None, "")
    )
    if data:
        entry["data"] = data

    (logger or logging.getLogger("checkpoint")).info(
        f"CHECKPOINT: {name}", extra={"extra": entry}
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
