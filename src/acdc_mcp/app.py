"""Startup wiring: discovery, providers and the search index."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass

from acdc_mcp.adapters import build_adapter_registry
from acdc_mcp.cancellation import OperationCancelledError
from acdc_mcp.config import ContentLocation, ServerConfig
from acdc_mcp.discovery import StartupError, discover_content
from acdc_mcp.prompts import PromptProvider
from acdc_mcp.resources import ResourceProvider, build_crossref_transformer
from acdc_mcp.search import SearchIndex

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class KnowledgeBase:
    """Everything the serving layer reads from after startup."""

    config: ServerConfig
    resources: ResourceProvider
    prompts: PromptProvider
    index: SearchIndex
    instructions: str

    def close(self) -> None:
        """Release the search index."""
        self.index.close()


def build_instructions(base_instructions: str, locations: Sequence[ContentLocation]) -> str:
    """Append the list of content sources to the configured instructions."""
    if not locations:
        return base_instructions
    lines = [base_instructions, "", "Available content sources:"]
    lines.extend(f"- {location.name}: {location.description}" for location in locations)
    lines.append("")
    lines.append("Use the search tool to find information. You can optionally filter by source.")
    return "\n".join(lines)


def build_knowledge_base(
    config: ServerConfig, cancel: threading.Event | None = None
) -> KnowledgeBase:
    """Discover content, build providers and index every resource.

    Raises StartupError for any fatal discovery or indexing failure.
    """
    registry = build_adapter_registry(scheme=config.scheme)
    discovered = discover_content(
        (location.to_location() for location in config.content), registry
    )

    transformer = None
    if config.cross_ref:
        transformer = build_crossref_transformer(discovered.resources, config.scheme)
    resources = ResourceProvider(discovered.resources, transformer=transformer)
    prompts = PromptProvider(discovered.prompts)

    index = SearchIndex(config.search)
    try:
        index.index(resources.stream_resources(cancel), cancel)
    except OperationCancelledError:
        index.close()
        raise
    except Exception as error:
        index.close()
        raise StartupError("index construction", None, error) from error

    logger.info(
        "Knowledge base ready: %d resources, %d prompts, %d indexed documents",
        len(resources),
        len(prompts),
        index.document_count,
    )
    return KnowledgeBase(
        config=config,
        resources=resources,
        prompts=prompts,
        index=index,
        instructions=build_instructions(config.server.instructions, config.content),
    )
