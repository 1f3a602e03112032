"""Startup discovery: resolve one adapter per content location and aggregate definitions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from acdc_mcp.adapters import (
    AdapterNotFoundError,
    AdapterRegistry,
    ContentAdapter,
    LayoutError,
    Location,
)
from acdc_mcp.prompts import PromptDefinition
from acdc_mcp.resources import ResourceDefinition

logger = logging.getLogger(__name__)


class UnknownAdapterError(LookupError):
    """Raised when a location names an adapter type that is not registered."""

    def __init__(self, adapter_type: str, registered: tuple[str, ...]) -> None:
        super().__init__(
            f"unknown adapter type {adapter_type!r} "
            f"(registered: {', '.join(registered) or 'none'})"
        )
        self.adapter_type = adapter_type
        self.registered = registered


class StartupError(RuntimeError):
    """Fatal startup failure carrying the operation and location that failed."""

    def __init__(self, operation: str, location: str | None, cause: BaseException) -> None:
        where = f" for content location {location!r}" if location else ""
        super().__init__(f"{operation} failed{where}: {cause}")
        self.operation = operation
        self.location = location
        self.cause = cause


@dataclass(slots=True, frozen=True)
class DiscoveryResult:
    """Aggregated definitions in configuration order."""

    resources: tuple[ResourceDefinition, ...]
    prompts: tuple[PromptDefinition, ...]
    adapters: tuple[tuple[str, str], ...]


def resolve_adapter(registry: AdapterRegistry, location: Location) -> ContentAdapter:
    """Return the explicit adapter for a location, or auto-detect one."""
    if location.adapter_type:
        adapter = registry.get(location.adapter_type)
        if adapter is None:
            raise UnknownAdapterError(location.adapter_type, registry.names())
        return adapter
    return registry.auto_detect(location.base_path)


def discover_content(
    locations: Iterable[Location], registry: AdapterRegistry
) -> DiscoveryResult:
    """Run discovery for every location in order.

    Any fatal adapter failure aborts with a StartupError naming the location.
    """
    resources: list[ResourceDefinition] = []
    prompts: list[PromptDefinition] = []
    chosen: list[tuple[str, str]] = []
    for location in locations:
        try:
            adapter = resolve_adapter(registry, location)
        except (UnknownAdapterError, AdapterNotFoundError) as error:
            raise StartupError("adapter resolution", location.name, error) from error
        logger.info(
            "Using adapter %s for content location %s (%s)",
            adapter.name,
            location.name,
            location.base_path,
        )
        try:
            location_resources = adapter.discover_resources(location)
        except (LayoutError, OSError) as error:
            raise StartupError("resource discovery", location.name, error) from error
        try:
            location_prompts = adapter.discover_prompts(location)
        except (LayoutError, OSError) as error:
            raise StartupError("prompt discovery", location.name, error) from error

        resources.extend(location_resources)
        prompts.extend(location_prompts)
        chosen.append((location.name, adapter.name))
        logger.info(
            "Discovered %d resources and %d prompts in %s",
            len(location_resources),
            len(location_prompts),
            location.name,
        )
    return DiscoveryResult(
        resources=tuple(resources),
        prompts=tuple(prompts),
        adapters=tuple(chosen),
    )
