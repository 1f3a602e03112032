"""Typed models for discovered prompts."""

from __future__ import annotations

from dataclasses import dataclass

from acdc_mcp.prompts.template import PromptTemplate


@dataclass(slots=True, frozen=True)
class PromptArgument:
    """Single declared prompt argument."""

    name: str
    description: str = ""
    required: bool = True


@dataclass(slots=True, frozen=True)
class PromptDefinition:
    """Discovered prompt with its compiled template."""

    name: str
    description: str
    arguments: tuple[PromptArgument, ...]
    file_path: str
    template: PromptTemplate
    source: str


def namespaced_prompt_name(source: str, name: str) -> str:
    """Build `<source>:<name>`."""
    return f"{source}:{name}"
