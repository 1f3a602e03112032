"""Typed coercion of frontmatter maps at the discovery boundary."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from acdc_mcp.prompts.models import PromptArgument


class MetadataError(ValueError):
    """Raised when required frontmatter fields are missing."""


@dataclass(slots=True, frozen=True)
class ResourceFrontmatter:
    """Validated resource metadata."""

    name: str
    description: str
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, object]) -> ResourceFrontmatter:
        name, description = _required_fields(metadata)
        return cls(
            name=name,
            description=description,
            keywords=_string_items(metadata.get("keywords")),
        )


@dataclass(slots=True, frozen=True)
class PromptFrontmatter:
    """Validated prompt metadata."""

    name: str
    description: str
    arguments: tuple[PromptArgument, ...] = ()

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, object]) -> PromptFrontmatter:
        name, description = _required_fields(metadata)
        return cls(
            name=name,
            description=description,
            arguments=_prompt_arguments(metadata.get("arguments")),
        )


def _required_fields(metadata: Mapping[str, object]) -> tuple[str, str]:
    values: dict[str, str] = {}
    missing: list[str] = []
    for field in ("name", "description"):
        value = metadata.get(field)
        if isinstance(value, str) and value.strip():
            values[field] = value
        else:
            missing.append(field)
    if missing:
        raise MetadataError(f"missing required metadata: {', '.join(missing)}")
    return values["name"], values["description"]


def _string_items(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item.strip())


def _prompt_arguments(value: object) -> tuple[PromptArgument, ...]:
    if not isinstance(value, list):
        return ()
    arguments: list[PromptArgument] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name:
            continue
        description = item.get("description")
        required = item.get("required")
        arguments.append(
            PromptArgument(
                name=name,
                description=description if isinstance(description, str) else "",
                required=required if isinstance(required, bool) else True,
            )
        )
    return tuple(arguments)
