"""Native layout adapter: `resources/` and optional `prompts/`."""

from __future__ import annotations

from acdc_mcp.adapters.layout import DirectoryLayoutAdapter

NATIVE_ADAPTER_NAME = "acdc-mcp"


class NativeLayoutAdapter(DirectoryLayoutAdapter):
    """Adapter for the native content layout."""

    name = NATIVE_ADAPTER_NAME
    resources_dir = "resources"
    prompts_dir = "prompts"
