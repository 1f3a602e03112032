"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

_VERBATIM_STRING_KEYS = {"uri", "source", "name"}
_REDACTED_STRING_KEYS = {"query"}
TOOL_CALL_METHOD = "tools/call"
PROMPT_GET_METHOD = "prompts/get"


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized representation of a single request."""

    timestamp: str
    request_id: str
    method: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Sanitize arguments so free text and prompt values never reach the log."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments.keys()):
        value = arguments[key]
        if key in _VERBATIM_STRING_KEYS and isinstance(value, str):
            sanitized[key] = value
            continue
        if key in _REDACTED_STRING_KEYS and isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
            continue
        if isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, list):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


def sanitize_request(method: str, params: dict[str, object]) -> dict[str, object]:
    """Sanitize request params, descending into tool and prompt arguments.

    Tool arguments get the same treatment as top-level params. Prompt argument
    values are user text substituted into templates, so only their names and
    lengths are kept.
    """
    nested = params.get("arguments")
    if method not in {TOOL_CALL_METHOD, PROMPT_GET_METHOD} or not isinstance(nested, dict):
        return sanitize_arguments(params)
    outer = {key: value for key, value in params.items() if key != "arguments"}
    sanitized = sanitize_arguments(outer)
    values = {str(key): value for key, value in nested.items()}
    if method == TOOL_CALL_METHOD:
        sanitized["arguments"] = sanitize_arguments(values)
        return sanitized
    sanitized["argument_lengths"] = {
        key: len(value) if isinstance(value, str) else type(value).__name__
        for key, value in sorted(values.items())
    }
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL audit logger."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append a sanitized event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")
