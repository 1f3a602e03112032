"""Built-in `search` and `read` tools."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from acdc_mcp.resources import ResourceNotFoundError, ResourceUnavailableError
from acdc_mcp.search import IndexClosedError, SearchOptions, SearchResult
from acdc_mcp.tools.registry import ToolDispatchError, ToolHandler, ToolRegistry

logger = logging.getLogger(__name__)

SEARCH_TOOL_NAME = "search"
READ_TOOL_NAME = "read"
BUILTIN_TOOL_NAMES = (SEARCH_TOOL_NAME, READ_TOOL_NAME)

DEFAULT_TOOL_DESCRIPTIONS = {
    SEARCH_TOOL_NAME: (
        "Search the knowledge base. Returns ranked documents with their URIs and a "
        "short snippet. Optionally filter by content source."
    ),
    READ_TOOL_NAME: "Read the full content of a resource by its URI.",
}

SEARCH_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "description": "The search query. Use natural language or keywords.",
        },
        "source": {
            "type": "string",
            "description": "Optional content source name to restrict results to.",
        },
    },
    "required": ["query"],
}

READ_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "uri": {"type": "string", "description": "The URI of the resource to read."},
    },
    "required": ["uri"],
}

SearchFn = Callable[[str, SearchOptions], list[SearchResult]]
ReadFn = Callable[[str], str]
DescribeFn = Callable[[str, str], str]


def register_builtin_tools(
    registry: ToolRegistry,
    search: SearchFn,
    read_resource: ReadFn,
    describe: DescribeFn,
) -> None:
    """Register the search and read tools, applying description overrides."""
    registry.register(
        SEARCH_TOOL_NAME,
        _search_handler(search),
        description=describe(SEARCH_TOOL_NAME, DEFAULT_TOOL_DESCRIPTIONS[SEARCH_TOOL_NAME]),
        input_schema=SEARCH_INPUT_SCHEMA,
    )
    registry.register(
        READ_TOOL_NAME,
        _read_handler(read_resource),
        description=describe(READ_TOOL_NAME, DEFAULT_TOOL_DESCRIPTIONS[READ_TOOL_NAME]),
        input_schema=READ_INPUT_SCHEMA,
    )


def format_search_results(
    query: str, source: str | None, results: Sequence[SearchResult]
) -> str:
    """Render results as a Markdown list for text-only clients."""
    scope = f" in source '{source}'" if source else ""
    if not results:
        return f"No results found for '{query}'{scope}"
    lines = [f"Search results for '{query}'{scope}:", ""]
    for result in results:
        lines.append(f"- [{result.source}] [{result.name}]({result.uri}): {result.snippet}")
    return "\n".join(lines)


def _search_handler(search: SearchFn) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        query = arguments.get("query")
        if not isinstance(query, str) or not query.strip():
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="search query must be a non-empty string.",
            )
        source = arguments.get("source")
        if source is not None and not isinstance(source, str):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="search source must be a string.",
            )
        source = source or None
        logger.info("Search request (query_length=%d, source=%s)", len(query), source)
        try:
            results = search(query, SearchOptions(source=source))
        except IndexClosedError as error:
            logger.error("Search failed: %s", error)
            raise ToolDispatchError(code="SEARCH_FAILED", message=str(error)) from error
        return {
            "query": query,
            "source": source,
            "results": [result.to_dict() for result in results],
            "text": format_search_results(query, source, results),
        }

    return handler


def _read_handler(read_resource: ReadFn) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        uri = arguments.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="read uri must be a non-empty string.",
            )
        logger.info("Read request (uri=%s)", uri)
        try:
            content = read_resource(uri)
        except ResourceNotFoundError as error:
            raise ToolDispatchError(code="NOT_FOUND", message=str(error)) from error
        except ResourceUnavailableError as error:
            raise ToolDispatchError(code="READ_FAILED", message=str(error)) from error
        return {"uri": uri, "text": content}

    return handler
