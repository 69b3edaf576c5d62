# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Observability - Structured Logging

JSON-structured logging for:
- Job run tracing
- Error tracking
- Audit trails

Features:
- Correlation IDs (request_id, run_id)
- Organization / user context injection
- Sensitive data masking (credentials, tokens, email addresses)
- Multiple output formats (JSON, human-readable)
"""

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

# ============================================================
# CONTEXT VARIABLES
# ============================================================

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
organization_id_var: ContextVar[str | None] = ContextVar("organization_id", default=None)
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)

_CONTEXT_VARS = {
    "request_id": request_id_var,
    "run_id": run_id_var,
    "organization_id": organization_id_var,
    "user_id": user_id_var,
}


def get_log_context() -> dict[str, str | None]:
    """Get current log context."""
    return {name: var.get() for name, var in _CONTEXT_VARS.items()}


@contextmanager
def log_context(**values: Any):
    """Bind context variables for the duration of a block."""
    tokens = []
    for name, value in values.items():
        var = _CONTEXT_VARS.get(name)
        if var is None:
            raise KeyError(f"Unknown log context field: {name}")
        tokens.append((var, var.set(None if value is None else str(value))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


# ============================================================
# SENSITIVE DATA MASKING
# ============================================================

# Fields that should be masked in logs
SENSITIVE_FIELDS = {
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "private_key",
    "bearer",
    "email",
}


def mask_sensitive_data(data: Any, depth: int = 0, max_depth: int = 10) -> Any:
    """
    Recursively mask sensitive data in dictionaries and lists.

    Args:
        data: Data to mask
        depth: Current recursion depth
        max_depth: Maximum recursion depth

    Returns:
        Data with sensitive fields masked
    """
    if depth > max_depth:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(s in key_lower for s in SENSITIVE_FIELDS):
                masked[key] = "[REDACTED]"
            else:
                masked[key] = mask_sensitive_data(value, depth + 1, max_depth)
        return masked

    elif isinstance(data, list):
        return [mask_sensitive_data(item, depth + 1, max_depth) for item in data]

    elif isinstance(data, str):
        if len(data) > 20 and data.startswith(("SG.", "Bearer ", "eyJ")):
            return f"{data[:8]}...[REDACTED]"
        return data

    return data


# ============================================================
# LOG RECORD STRUCTURE
# ============================================================


@dataclass
class StructuredLogRecord:
    """Structured log record for JSON output."""

    timestamp: str
    level: str
    logger: str
    message: str

    # Context
    request_id: str | None = None
    run_id: str | None = None
    organization_id: str | None = None
    user_id: str | None = None

    # Location
    module: str | None = None
    function: str | None = None
    line: int | None = None

    # Error info
    error_type: str | None = None
    error_message: str | None = None
    stack_trace: str | None = None

    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None and v != {}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


# ============================================================
# JSON FORMATTER
# ============================================================


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as single-line JSON for easy parsing by log aggregators.
    """

    def __init__(self, mask_sensitive: bool = True):
        super().__init__()
        self.mask_sensitive = mask_sensitive

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        log_record = StructuredLogRecord(
            timestamp=datetime.now(UTC).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            request_id=ctx.get("request_id"),
            run_id=ctx.get("run_id"),
            organization_id=ctx.get("organization_id"),
            user_id=ctx.get("user_id"),
            module=record.module,
            function=record.funcName,
            line=record.lineno,
        )

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                log_record.error_type = exc_type.__name__
                log_record.error_message = str(exc_value)
                log_record.stack_trace = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS and key not in _CONTEXT_VARS
        }
        if extra_fields:
            if self.mask_sensitive:
                extra_fields = mask_sensitive_data(extra_fields)
            log_record.extra = extra_fields

        return log_record.to_json()


# ============================================================
# HUMAN-READABLE FORMATTER
# ============================================================


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter with color support.

    Includes run and organization context inline for easy debugging.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        ctx_parts = []
        if ctx.get("run_id"):
            ctx_parts.append(f"run={ctx['run_id'][:8]}")
        if ctx.get("request_id"):
            ctx_parts.append(f"req={ctx['request_id'][:8]}")
        if ctx.get("organization_id"):
            ctx_parts.append(f"org={ctx['organization_id'][:8]}")
        ctx_str = f"[{' '.join(ctx_parts)}] " if ctx_parts else ""

        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        line = f"{timestamp} {level:8} {record.name}:{record.lineno} {ctx_str}{record.getMessage()}"

        if record.exc_info:
            exc_text = "".join(traceback.format_exception(*record.exc_info))
            line = f"{line}\n{exc_text}"

        return line


# ============================================================
# LOGGING CONFIGURATION
# ============================================================


def configure_logging(
    level: str = "INFO",
    format: str = "json",  # "json" or "human"
    mask_sensitive: bool = True,
    use_colors: bool = True,
):
    """
    Configure logging for Thrive.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format ("json" for production, "human" for development)
        mask_sensitive: Whether to mask sensitive data (json format)
        use_colors: Whether to use colors (only for human format)
    """
    if format == "json":
        formatter: logging.Formatter = JSONFormatter(mask_sensitive=mask_sensitive)
    else:
        formatter = HumanFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Set levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return root_logger


# ============================================================
# AUDIT LOGGING
# ============================================================


class AuditLogger:
    """
    Specialized logger for audit events.

    Audit events are always logged at INFO level with specific structure.
    """

    def __init__(self, name: str = "thrive.audit"):
        self._logger = logging.getLogger(name)

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ):
        """
        Log an audit event.

        Args:
            action: Action performed (e.g., "demo_cleanup", "anonymize")
            resource_type: Type of resource (e.g., "user", "demo_users")
            resource_id: ID of the resource
            details: Additional details
            success: Whether the action succeeded
        """
        self._logger.info(
            f"AUDIT: {action} {resource_type}",
            extra={
                "audit_event": True,
                "action": action,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "success": success,
                "details": mask_sensitive_data(details) if details else None,
            },
        )


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    # Context
    "get_log_context",
    "log_context",
    # Logging
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    "StructuredLogRecord",
    # Audit
    "AuditLogger",
    "mask_sensitive_data",
    "SENSITIVE_FIELDS",
    # Context vars
    "request_id_var",
    "run_id_var",
    "organization_id_var",
    "user_id_var",
]
