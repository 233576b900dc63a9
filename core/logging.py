# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with run context
# PURPOSE: Consistent, queryable progress logging for pipeline runs
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Human-readable or JSON log output for the model generator.

Every record carries the active run context (run_id, stage, schema_name,
container_id, component), pushed with ``log_context`` by the coordinator.
Loggers from ``get_logger`` add their component when no run context sets
one.

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger("tsooq_gen", component=ComponentType.CLI)

    with log_context(run_id="a1b2", schema_name="public"):
        logger.info("Pulling image...")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Union


class ComponentType(str, Enum):
    """Who emitted a record."""
    PIPELINE = "pipeline"
    CLI = "cli"


# ============================================================================
# RUN CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside ``log_context``."""
    run_id: Optional[str] = None
    stage: Optional[str] = None
    schema_name: Optional[str] = None
    container_id: Optional[str] = None
    component: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Set fields only."""
        return {key: value for key, value in asdict(self).items() if value is not None}


_EMPTY_CONTEXT = LogContext()
_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    """Innermost context of this thread."""
    stack = _stack()
    return stack[-1] if stack else _EMPTY_CONTEXT


@contextmanager
def log_context(**fields: Any) -> Iterator[LogContext]:
    """
    Push context fields for the duration of a block.

    Fields not given are inherited from the enclosing context.

    Example:
        with log_context(run_id="a1b2", stage="introspected"):
            logger.info("Loaded 12 tables")
    """
    fields = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}
    context = replace(get_current_context(), **fields)

    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def _record_context(record: logging.LogRecord) -> Dict[str, str]:
    """Thread context, falling back to the logger's own component."""
    context = get_current_context().to_dict()
    component = getattr(record, "component", None)
    if component and "component" not in context:
        context["component"] = component
    return context


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# ============================================================================
# FORMATTERS
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for CI log collection."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _record_context(record)
        if context:
            log_data["context"] = context

        # log_checkpoint payload
        data = getattr(record, "data", None)
        if data:
            log_data["data"] = data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Single-line console format with the run context inline.

    With ``color`` set, the line is wrapped in an ANSI colour chosen by level.
    """

    COLORS = {
        logging.DEBUG: "\x1b[90m",
        logging.INFO: "\x1b[33m",
        logging.WARNING: "\x1b[35m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31m",
    }
    RESET = "\x1b[0m"

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = []
        if context.run_id:
            tags.append(f"run={context.run_id}")
        if context.stage:
            tags.append(f"stage={context.stage}")
        if context.container_id:
            tags.append(f"container={context.container_id[:12]}")
        tag_str = f" [{', '.join(tags)}]" if tags else ""

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} {record.levelname.ljust(8)} {record.name}{tag_str}: {record.getMessage()}"

        if self.color:
            line = f"{self.COLORS.get(record.levelno, '')}{line}{self.RESET}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter stamping its component onto every record."""

    def process(self, msg, kwargs):
        component = self.extra.get("component")
        if component is not None:
            kwargs["extra"] = {**kwargs.get("extra", {}), "component": component}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """Logger whose records carry ``component`` unless a run context sets one."""
    value = component.value if component is not None else None
    return ContextLogger(logging.getLogger(name), {"component": value})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stream=None,
) -> None:
    """
    Install a single root handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (also enabled by LOG_FORMAT=json)
        stream: Output stream (defaults to stdout)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    stream = stream or sys.stdout

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter = StructuredFormatter()
    else:
        use_color = hasattr(stream, "isatty") and stream.isatty() and not os.getenv("NO_COLOR")
        formatter = HumanFormatter(color=use_color)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


# ============================================================================
# CHECKPOINTS
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a pipeline stage transition at DEBUG.

    The run context is copied into the payload so a run's progress can be
    reconstructed from checkpoint records alone.
    """
    payload: Dict[str, Any] = {"checkpoint": name, "timestamp": _utc_timestamp()}
    payload.update(get_current_context().to_dict())
    if data:
        payload["data"] = data

    (logger or logging.getLogger("checkpoint")).debug(f"CHECKPOINT: {name}", extra={"data": payload})


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
