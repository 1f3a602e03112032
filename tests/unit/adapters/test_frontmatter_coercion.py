from __future__ import annotations

import pytest

from acdc_mcp.adapters import MetadataError, PromptFrontmatter, ResourceFrontmatter
from acdc_mcp.prompts import PromptArgument


def test_resource_frontmatter_requires_name_and_description() -> None:
    with pytest.raises(MetadataError, match="name, description"):
        ResourceFrontmatter.from_metadata({})
    with pytest.raises(MetadataError, match="description"):
        ResourceFrontmatter.from_metadata({"name": "x", "description": "   "})


def test_required_fields_are_kept_verbatim() -> None:
    metadata = ResourceFrontmatter.from_metadata(
        {"name": " Padded Name ", "description": "Line one\nline two\n"}
    )

    assert metadata.name == " Padded Name "
    assert metadata.description == "Line one\nline two\n"


def test_resource_keywords_keep_only_non_empty_strings() -> None:
    metadata = ResourceFrontmatter.from_metadata(
        {"name": "x", "description": "y", "keywords": ["a", 3, "", "b"]}
    )

    assert metadata.keywords == ("a", "b")


def test_resource_keywords_ignore_non_list_values() -> None:
    metadata = ResourceFrontmatter.from_metadata(
        {"name": "x", "description": "y", "keywords": "single"}
    )

    assert metadata.keywords == ()


def test_prompt_arguments_default_to_required() -> None:
    metadata = PromptFrontmatter.from_metadata(
        {
            "name": "p",
            "description": "d",
            "arguments": [
                {"name": "a"},
                {"name": "b", "required": "no"},
                {"name": "c", "required": False, "description": "optional"},
                {"description": "nameless"},
                "not-a-mapping",
            ],
        }
    )

    assert metadata.arguments == (
        PromptArgument(name="a", description="", required=True),
        PromptArgument(name="b", description="", required=True),
        PromptArgument(name="c", description="optional", required=False),
    )
