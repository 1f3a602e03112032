"""Adapter registry with deterministic selection behavior."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from acdc_mcp.adapters.base import AdapterNotFoundError, ContentAdapter


@dataclass(slots=True)
class AdapterRegistry:
    """Ordered adapter registry with lookup by name."""

    _adapters: list[ContentAdapter] = field(default_factory=list)

    def register(self, adapter: ContentAdapter) -> None:
        """Register an adapter in deterministic insertion order.

        Re-registering a name replaces the earlier adapter in place.
        """
        for index, existing in enumerate(self._adapters):
            if existing.name == adapter.name:
                self._adapters[index] = adapter
                return
        self._adapters.append(adapter)

    def get(self, name: str) -> ContentAdapter | None:
        """Return an adapter by its type name."""
        for adapter in self._adapters:
            if adapter.name == name:
                return adapter
        return None

    def auto_detect(self, base_path: Path) -> ContentAdapter:
        """Select the first adapter whose layout check succeeds."""
        for adapter in self._adapters:
            if adapter.can_handle(base_path):
                return adapter
        raise AdapterNotFoundError(base_path, self.names())

    def names(self) -> tuple[str, ...]:
        """Return registered adapter names in deterministic order."""
        return tuple(adapter.name for adapter in self._adapters)
