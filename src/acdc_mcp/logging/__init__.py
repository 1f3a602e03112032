"""Structured logging utilities."""

from .audit import (
    AuditEvent,
    JsonlAuditLogger,
    sanitize_arguments,
    sanitize_request,
    utc_timestamp,
)
from .console import LOG_LEVELS, configure_logging

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "LOG_LEVELS",
    "configure_logging",
    "sanitize_arguments",
    "sanitize_request",
    "utc_timestamp",
]
