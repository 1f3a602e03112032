"""Typed models for discovered resources."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePosixPath

MARKDOWN_MIME_TYPE = "text/markdown"


@dataclass(slots=True, frozen=True)
class ResourceDefinition:
    """Discovered Markdown resource addressable by URI."""

    uri: str
    name: str
    description: str
    file_path: str
    source: str
    keywords: tuple[str, ...] = ()
    mime_type: str = MARKDOWN_MIME_TYPE


@dataclass(slots=True, frozen=True)
class Document:
    """Rendered resource body handed to the search index."""

    uri: str
    name: str
    content: str
    source: str
    keywords: tuple[str, ...] = ()


ContentTransformer = Callable[[str, ResourceDefinition], str]


def build_resource_uri(scheme: str, source: str, relative_path: str) -> str:
    """Build `<scheme>://<source>/<relative-path-without-extension>`."""
    posix = PurePosixPath(relative_path.replace("\\", "/"))
    return f"{scheme}://{source}/{posix.with_suffix('').as_posix()}"
