"""In-memory resource lookup and on-demand body rendering."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from acdc_mcp.cancellation import raise_if_cancelled
from acdc_mcp.content import strip_frontmatter
from acdc_mcp.resources.models import ContentTransformer, Document, ResourceDefinition

logger = logging.getLogger(__name__)


class ResourceNotFoundError(LookupError):
    """Raised when a resource URI is not known."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"unknown resource: {uri}")
        self.uri = uri


class ResourceUnavailableError(OSError):
    """Raised when a known resource can no longer be read from disk."""

    def __init__(self, uri: str, reason: str) -> None:
        super().__init__(f"resource {uri} could not be read: {reason}")
        self.uri = uri
        self.reason = reason


class ResourceProvider:
    """Read-only resource table built once from discovered definitions."""

    def __init__(
        self,
        definitions: Iterable[ResourceDefinition],
        transformer: ContentTransformer | None = None,
    ) -> None:
        self._definitions: list[ResourceDefinition] = []
        self._by_uri: dict[str, ResourceDefinition] = {}
        for definition in definitions:
            if definition.uri in self._by_uri:
                logger.warning(
                    "Ignoring duplicate resource %s from %s; first definition from %s wins",
                    definition.uri,
                    definition.file_path,
                    self._by_uri[definition.uri].file_path,
                )
                continue
            self._by_uri[definition.uri] = definition
            self._definitions.append(definition)
        self._transformer = transformer

    def __len__(self) -> int:
        return len(self._definitions)

    def list_resources(self) -> list[ResourceDefinition]:
        """Return all definitions in discovery order."""
        return list(self._definitions)

    def get(self, uri: str) -> ResourceDefinition | None:
        """Return a definition by URI, if known."""
        return self._by_uri.get(uri)

    def read_resource(self, uri: str) -> str:
        """Re-read a resource from disk and return its rendered body."""
        definition = self._by_uri.get(uri)
        if definition is None:
            raise ResourceNotFoundError(uri)
        try:
            text = Path(definition.file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise ResourceUnavailableError(uri, str(error)) from error
        body = strip_frontmatter(text)
        if self._transformer is not None:
            body = self._transformer(body, definition)
        return body

    def stream_resources(self, cancel: threading.Event | None = None) -> Iterator[Document]:
        """Yield one rendered Document per resource, skipping unreadable files."""
        for definition in self._definitions:
            raise_if_cancelled(cancel, "resource streaming")
            try:
                content = self.read_resource(definition.uri)
            except ResourceUnavailableError as error:
                logger.warning("Skipping resource %s for indexing: %s", definition.uri, error)
                continue
            yield Document(
                uri=definition.uri,
                name=definition.name,
                content=content,
                source=definition.source,
                keywords=definition.keywords,
            )
