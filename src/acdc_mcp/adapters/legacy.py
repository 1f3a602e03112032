"""Legacy layout adapter: `mcp-resources/` and optional `mcp-prompts/`."""

from __future__ import annotations

import logging

from acdc_mcp.adapters.base import Location
from acdc_mcp.adapters.layout import DirectoryLayoutAdapter
from acdc_mcp.adapters.native import NativeLayoutAdapter
from acdc_mcp.prompts.models import PromptDefinition
from acdc_mcp.resources.models import ResourceDefinition

logger = logging.getLogger(__name__)

LEGACY_ADAPTER_NAME = "legacy"


class LegacyLayoutAdapter(DirectoryLayoutAdapter):
    """Backward-compatible adapter for the older `mcp-*` directory names."""

    name = LEGACY_ADAPTER_NAME
    resources_dir = "mcp-resources"
    prompts_dir = "mcp-prompts"

    def discover_resources(self, location: Location) -> list[ResourceDefinition]:
        self._warn_deprecated(location, self.resources_dir, NativeLayoutAdapter.resources_dir)
        return super().discover_resources(location)

    def discover_prompts(self, location: Location) -> list[PromptDefinition]:
        self._warn_deprecated(location, self.prompts_dir, NativeLayoutAdapter.prompts_dir)
        return super().discover_prompts(location)

    def _warn_deprecated(self, location: Location, legacy_dir: str, native_dir: str) -> None:
        logger.warning(
            "Content location %r uses the legacy layout; rename %s/ to %s/",
            location.name,
            legacy_dir,
            native_dir,
        )
