"""Snippet generation around the densest run of matched tokens."""

from __future__ import annotations

import re
from collections.abc import Collection, Sequence

from acdc_mcp.search.analysis import Token

SNIPPET_WINDOW_TOKENS = 30
SNIPPET_LEAD_TOKENS = 5
HIGHLIGHT_MARK = "**"
ELLIPSIS = "..."

_WHITESPACE = re.compile(r"\s+")


def best_window_start(positions: Sequence[int], window: int) -> int | None:
    """Return the matched position opening the window with the most matches.

    Positions must be ascending. The earliest window wins ties.
    """
    if not positions:
        return None
    best_start = positions[0]
    best_count = 0
    right = 0
    for left, start in enumerate(positions):
        while right < len(positions) and positions[right] < start + window:
            right += 1
        count = right - left
        if count > best_count:
            best_start = start
            best_count = count
    return best_start


def build_snippet(
    content: str,
    tokens: Sequence[Token],
    matched_stems: Collection[str],
    window: int = SNIPPET_WINDOW_TOKENS,
) -> str:
    """Build a short highlighted excerpt of content.

    Falls back to the leading tokens when nothing in content matched.
    """
    if not tokens:
        return _collapse(content).strip()[: window * 8]

    positions = [index for index, token in enumerate(tokens) if token.stem in matched_stems]
    anchor = best_window_start(positions, window)
    if anchor is None:
        start = 0
    else:
        start = max(0, min(anchor - SNIPPET_LEAD_TOKENS, len(tokens) - window))
    end = min(len(tokens), start + window)

    parts: list[str] = []
    if start > 0:
        parts.append(ELLIPSIS + " ")
    previous_end: int | None = None
    for token in tokens[start:end]:
        if previous_end is not None:
            parts.append(_collapse(content[previous_end : token.start]))
        surface = content[token.start : token.end]
        if token.stem in matched_stems:
            surface = f"{HIGHLIGHT_MARK}{surface}{HIGHLIGHT_MARK}"
        parts.append(surface)
        previous_end = token.end
    if end < len(tokens):
        parts.append(" " + ELLIPSIS)
    elif previous_end is not None:
        parts.append(_collapse(content[previous_end:]).rstrip())
    return "".join(parts)


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text)
