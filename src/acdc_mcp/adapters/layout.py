"""Directory layout adapter shared by the native and legacy conventions."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from acdc_mcp.adapters.base import LayoutError, Location
from acdc_mcp.adapters.metadata import MetadataError, PromptFrontmatter, ResourceFrontmatter
from acdc_mcp.content import ParseError, load_markdown
from acdc_mcp.prompts.models import PromptDefinition, namespaced_prompt_name
from acdc_mcp.prompts.template import TemplateSyntaxError, compile_template
from acdc_mcp.resources.models import ResourceDefinition, build_resource_uri

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
DEFAULT_SCHEME = "acdc"

_SKIPPABLE_FILE_ERRORS = (
    OSError,
    UnicodeDecodeError,
    ParseError,
    MetadataError,
    TemplateSyntaxError,
)


class DirectoryLayoutAdapter:
    """Discover resources and prompts under two named subdirectories.

    The resources directory is required; the prompts directory is optional.
    """

    name = "layout"
    resources_dir = "resources"
    prompts_dir = "prompts"

    def __init__(self, scheme: str = DEFAULT_SCHEME) -> None:
        self.scheme = scheme

    def can_handle(self, base_path: Path) -> bool:
        """Return True when the required resources directory exists."""
        try:
            return (Path(base_path) / self.resources_dir).is_dir()
        except OSError:
            return False

    def discover_resources(self, location: Location) -> list[ResourceDefinition]:
        """Walk the resources directory and build resource definitions."""
        root = location.base_path / self.resources_dir
        if not root.is_dir():
            raise LayoutError(
                location.name,
                f"resources directory not found: {root}",
            )

        definitions: list[ResourceDefinition] = []
        for path in _iter_markdown_files(root, strict=True):
            try:
                document = load_markdown(path)
                metadata = ResourceFrontmatter.from_metadata(document.metadata)
            except _SKIPPABLE_FILE_ERRORS as error:
                logger.warning(
                    "Skipping invalid resource file %s (adapter=%s): %s", path, self.name, error
                )
                continue
            relative = path.relative_to(root).as_posix()
            uri = build_resource_uri(self.scheme, location.name, relative)
            definitions.append(
                ResourceDefinition(
                    uri=uri,
                    name=metadata.name,
                    description=metadata.description,
                    file_path=str(path),
                    source=location.name,
                    keywords=metadata.keywords,
                )
            )
            logger.info(
                "Loaded resource %s (name=%s, source=%s, adapter=%s)",
                uri,
                metadata.name,
                location.name,
                self.name,
            )
        return definitions

    def discover_prompts(self, location: Location) -> list[PromptDefinition]:
        """Walk the optional prompts directory and compile prompt templates."""
        root = location.base_path / self.prompts_dir
        if not root.exists():
            logger.debug("Prompts directory not found (optional): %s", root)
            return []
        if not root.is_dir():
            logger.warning("Prompts path is not a directory: %s", root)
            return []

        definitions: list[PromptDefinition] = []
        for path in _iter_markdown_files(root, strict=False):
            try:
                document = load_markdown(path)
                metadata = PromptFrontmatter.from_metadata(document.metadata)
                name = namespaced_prompt_name(location.name, metadata.name)
                template = compile_template(name, document.content)
            except _SKIPPABLE_FILE_ERRORS as error:
                logger.warning(
                    "Skipping invalid prompt file %s (adapter=%s): %s", path, self.name, error
                )
                continue
            definitions.append(
                PromptDefinition(
                    name=name,
                    description=metadata.description,
                    arguments=metadata.arguments,
                    file_path=str(path),
                    template=template,
                    source=location.name,
                )
            )
            logger.info(
                "Loaded prompt %s (source=%s, adapter=%s)", name, location.name, self.name
            )
        return definitions


def _iter_markdown_files(root: Path, strict: bool) -> Iterator[Path]:
    """Yield Markdown files under root in lexical, depth-first order.

    Entries of a directory are visited by name, with subdirectories
    descended in place. Listing errors propagate when strict and are
    logged otherwise.
    """
    try:
        with os.scandir(root) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError as error:
        if strict:
            raise
        logger.error("Error walking %s: %s", root, error)
        return

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            yield from _iter_markdown_files(path, strict)
        elif os.path.splitext(entry.name)[1] == MARKDOWN_SUFFIX:
            yield path
