"""Runtime adapter registry construction."""

from __future__ import annotations

from acdc_mcp.adapters.layout import DEFAULT_SCHEME
from acdc_mcp.adapters.legacy import LegacyLayoutAdapter
from acdc_mcp.adapters.native import NativeLayoutAdapter
from acdc_mcp.adapters.registry import AdapterRegistry


def build_adapter_registry(scheme: str = DEFAULT_SCHEME) -> AdapterRegistry:
    """Build the standard registry: native layout first, then legacy."""
    registry = AdapterRegistry()
    registry.register(NativeLayoutAdapter(scheme=scheme))
    registry.register(LegacyLayoutAdapter(scheme=scheme))
    return registry
