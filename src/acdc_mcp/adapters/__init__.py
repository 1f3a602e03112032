"""Content layout adapter interfaces."""

from .base import AdapterNotFoundError, ContentAdapter, LayoutError, Location
from .layout import DEFAULT_SCHEME, MARKDOWN_SUFFIX, DirectoryLayoutAdapter
from .legacy import LEGACY_ADAPTER_NAME, LegacyLayoutAdapter
from .metadata import MetadataError, PromptFrontmatter, ResourceFrontmatter
from .native import NATIVE_ADAPTER_NAME, NativeLayoutAdapter
from .registry import AdapterRegistry
from .runtime import build_adapter_registry

__all__ = [
    "AdapterNotFoundError",
    "AdapterRegistry",
    "ContentAdapter",
    "DEFAULT_SCHEME",
    "DirectoryLayoutAdapter",
    "LEGACY_ADAPTER_NAME",
    "LayoutError",
    "LegacyLayoutAdapter",
    "Location",
    "MARKDOWN_SUFFIX",
    "MetadataError",
    "NATIVE_ADAPTER_NAME",
    "NativeLayoutAdapter",
    "PromptFrontmatter",
    "ResourceFrontmatter",
    "build_adapter_registry",
]
