"""Core adapter protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from acdc_mcp.prompts.models import PromptDefinition
from acdc_mcp.resources.models import ResourceDefinition


@dataclass(slots=True, frozen=True)
class Location:
    """Resolved content location handed to an adapter."""

    name: str
    base_path: Path
    adapter_type: str | None = None


class LayoutError(Exception):
    """Raised when a location is missing its required layout directory."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"content location {location!r}: {reason}")
        self.location = location
        self.reason = reason


class AdapterNotFoundError(LookupError):
    """Raised when no registered adapter recognizes a location layout."""

    def __init__(self, base_path: Path, registered: tuple[str, ...]) -> None:
        super().__init__(
            f"no adapter recognizes the layout at {base_path} "
            f"(registered: {', '.join(registered) or 'none'})"
        )
        self.base_path = base_path
        self.registered = registered


class ContentAdapter(Protocol):
    """Protocol implemented by directory layout adapters."""

    name: str

    def can_handle(self, base_path: Path) -> bool:
        """Return True when the layout's required directory exists."""

    def discover_resources(self, location: Location) -> list[ResourceDefinition]:
        """Return resource definitions in deterministic walk order."""

    def discover_prompts(self, location: Location) -> list[PromptDefinition]:
        """Return prompt definitions in deterministic walk order."""
