"""Markdown frontmatter loading and stripping."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

FRONTMATTER_DELIMITER = "---"


class ParseError(ValueError):
    """Raised when a frontmatter header is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(slots=True, frozen=True)
class MarkdownDocument:
    """Parsed metadata header plus free-form body text."""

    metadata: dict[str, object] = field(default_factory=dict)
    content: str = ""


def load_markdown(path: str | Path) -> MarkdownDocument:
    """Read a Markdown file and split its frontmatter header from the body."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_markdown(text, source=str(path))


def parse_markdown(text: str, source: str = "<string>") -> MarkdownDocument:
    """Split frontmatter from body, raising ParseError on malformed headers."""
    normalized = text.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIMITER:
        return MarkdownDocument(metadata={}, content=normalized)

    closing_index = _closing_delimiter_index(lines)
    if closing_index is None:
        raise ParseError(source, "frontmatter opened but never closed")

    header = "\n".join(lines[1:closing_index])
    try:
        payload = yaml.safe_load(header) if header.strip() else {}
    except yaml.YAMLError as error:
        raise ParseError(source, f"invalid frontmatter: {error}") from error
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ParseError(source, "frontmatter must be a mapping of keys to values")

    body = "\n".join(lines[closing_index + 1 :])
    return MarkdownDocument(
        metadata={str(key): value for key, value in payload.items()},
        content=body,
    )


def strip_frontmatter(text: str) -> str:
    """Return body text only; malformed headers leave the text unchanged."""
    normalized = text.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIMITER:
        return text
    closing_index = _closing_delimiter_index(lines)
    if closing_index is None:
        return text
    return "\n".join(lines[closing_index + 1 :])


def _closing_delimiter_index(lines: list[str]) -> int | None:
    for index in range(1, len(lines)):
        if lines[index].rstrip() == FRONTMATTER_DELIMITER:
            return index
    return None
