"""Rewrite relative Markdown links into resource URIs.

Links are matched textually. Link text may not contain nested square
brackets; such links are left untouched. Titles may contain escaped double
quotes (``\\"``).
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from typing import Final

from acdc_mcp.resources.models import ContentTransformer, ResourceDefinition

# Groups: 1 link text, 2 target (no whitespace), 3 optional title with leading whitespace.
MARKDOWN_LINK_PATTERN: Final[re.Pattern[str]] = re.compile(
    r'!?\[([^\]]*)\]\(([^)\s]+)(\s+"(?:[^"\\]|\\.)*")?\)'
)


def build_crossref_transformer(
    definitions: Iterable[ResourceDefinition],
    scheme: str,
) -> ContentTransformer:
    """Build a transformer that rewrites links to known resource files."""
    path_to_uri: dict[str, str] = {}
    for definition in definitions:
        path_to_uri.setdefault(os.path.normpath(definition.file_path), definition.uri)
    scheme_prefix = f"{scheme}://"

    def transform(content: str, current: ResourceDefinition) -> str:
        current_dir = os.path.dirname(current.file_path)

        def replace(match: re.Match[str]) -> str:
            original = match.group(0)
            if original.startswith("!"):
                return original
            link_text = match.group(1)
            target = match.group(2)
            title = match.group(3) or ""
            if not is_rewritable_target(target, scheme_prefix):
                return original

            path_part, hash_mark, fragment = target.partition("#")
            resolved = os.path.normpath(os.path.join(current_dir, path_part))
            uri = path_to_uri.get(resolved)
            if uri is None:
                return original
            return f"[{link_text}]({uri}{hash_mark}{fragment}{title})"

        return MARKDOWN_LINK_PATTERN.sub(replace, content)

    return transform


def is_rewritable_target(target: str, scheme_prefix: str) -> bool:
    """Return True for relative file targets eligible for rewriting."""
    if not target or target.startswith("#"):
        return False
    if target.startswith(scheme_prefix) or "://" in target:
        return False
    # mailto:, tel: and other colon-delimited schemes
    if ":" in target:
        return False
    return True
