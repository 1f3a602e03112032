"""Markdown content loading."""

from .frontmatter import (
    FRONTMATTER_DELIMITER,
    MarkdownDocument,
    ParseError,
    load_markdown,
    parse_markdown,
    strip_frontmatter,
)

__all__ = [
    "FRONTMATTER_DELIMITER",
    "MarkdownDocument",
    "ParseError",
    "load_markdown",
    "parse_markdown",
    "strip_frontmatter",
]
