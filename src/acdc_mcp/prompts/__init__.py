"""Prompt definitions, templates and lookup."""

from .models import PromptArgument, PromptDefinition, namespaced_prompt_name
from .provider import PromptArgumentError, PromptNotFoundError, PromptProvider
from .template import PromptTemplate, TemplateSyntaxError, compile_template

__all__ = [
    "PromptArgument",
    "PromptArgumentError",
    "PromptDefinition",
    "PromptNotFoundError",
    "PromptProvider",
    "PromptTemplate",
    "TemplateSyntaxError",
    "compile_template",
    "namespaced_prompt_name",
]
