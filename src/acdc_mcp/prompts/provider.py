"""In-memory prompt lookup and template expansion."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from acdc_mcp.prompts.models import PromptDefinition

logger = logging.getLogger(__name__)


class PromptNotFoundError(LookupError):
    """Raised when a prompt name is not known."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown prompt: {name}")
        self.name = name


class PromptArgumentError(ValueError):
    """Raised when a required prompt argument is missing or empty."""

    def __init__(self, prompt: str, argument: str) -> None:
        super().__init__(f"missing required argument: {argument}")
        self.prompt = prompt
        self.argument = argument


class PromptProvider:
    """Read-only prompt table built once from discovered definitions."""

    def __init__(self, definitions: Iterable[PromptDefinition]) -> None:
        self._definitions: list[PromptDefinition] = []
        self._by_name: dict[str, PromptDefinition] = {}
        for definition in definitions:
            if definition.name in self._by_name:
                logger.warning(
                    "Ignoring duplicate prompt %s from %s; first definition from %s wins",
                    definition.name,
                    definition.file_path,
                    self._by_name[definition.name].file_path,
                )
                continue
            self._by_name[definition.name] = definition
            self._definitions.append(definition)

    def __len__(self) -> int:
        return len(self._definitions)

    def list_prompts(self) -> list[PromptDefinition]:
        """Return all prompt definitions in discovery order."""
        return list(self._definitions)

    def get_prompt(self, name: str, arguments: Mapping[str, str] | None = None) -> str:
        """Validate arguments and render the named prompt."""
        definition = self._by_name.get(name)
        if definition is None:
            raise PromptNotFoundError(name)
        values = dict(arguments or {})
        for argument in definition.arguments:
            if argument.required and not values.get(argument.name):
                raise PromptArgumentError(name, argument.name)
        return definition.template.render(values)
