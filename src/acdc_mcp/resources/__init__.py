"""Resource definitions, cross-references and lookup."""

from .crossref import MARKDOWN_LINK_PATTERN, build_crossref_transformer, is_rewritable_target
from .models import (
    MARKDOWN_MIME_TYPE,
    ContentTransformer,
    Document,
    ResourceDefinition,
    build_resource_uri,
)
from .provider import ResourceNotFoundError, ResourceProvider, ResourceUnavailableError

__all__ = [
    "ContentTransformer",
    "Document",
    "MARKDOWN_LINK_PATTERN",
    "MARKDOWN_MIME_TYPE",
    "ResourceDefinition",
    "ResourceNotFoundError",
    "ResourceProvider",
    "ResourceUnavailableError",
    "build_crossref_transformer",
    "build_resource_uri",
    "is_rewritable_target",
]
