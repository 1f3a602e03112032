from __future__ import annotations

from pathlib import Path

import pytest

from acdc_mcp.adapters import Location, build_adapter_registry
from acdc_mcp.discovery import StartupError, UnknownAdapterError, discover_content


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _doc(name: str) -> str:
    return f"---\nname: {name}\ndescription: {name} doc\n---\nbody\n"


def test_discovery_aggregates_in_configuration_order(tmp_path: Path) -> None:
    _write(tmp_path / "zeta" / "resources" / "a.md", _doc("Zeta A"))
    _write(tmp_path / "alpha" / "mcp-resources" / "a.md", _doc("Alpha A"))
    _write(tmp_path / "alpha" / "mcp-prompts" / "p.md", _doc("p"))
    locations = [
        Location(name="zeta", base_path=tmp_path / "zeta"),
        Location(name="alpha", base_path=tmp_path / "alpha"),
    ]

    result = discover_content(locations, build_adapter_registry())

    assert [resource.uri for resource in result.resources] == [
        "acdc://zeta/a",
        "acdc://alpha/a",
    ]
    assert [prompt.name for prompt in result.prompts] == ["alpha:p"]
    assert result.adapters == (("zeta", "acdc-mcp"), ("alpha", "legacy"))


def test_explicit_adapter_type_wins_over_detection(tmp_path: Path) -> None:
    _write(tmp_path / "resources" / "native.md", _doc("Native"))
    _write(tmp_path / "mcp-resources" / "old.md", _doc("Old"))
    location = Location(name="docs", base_path=tmp_path, adapter_type="legacy")

    result = discover_content([location], build_adapter_registry())

    assert [resource.name for resource in result.resources] == ["Old"]


def test_unknown_adapter_type_is_fatal(tmp_path: Path) -> None:
    location = Location(name="docs", base_path=tmp_path, adapter_type="wiki")

    with pytest.raises(StartupError, match="content location 'docs'") as info:
        discover_content([location], build_adapter_registry())

    assert isinstance(info.value.cause, UnknownAdapterError)
    assert info.value.operation == "adapter resolution"


def test_undetectable_layout_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(StartupError, match="no adapter recognizes"):
        discover_content([Location(name="docs", base_path=tmp_path)], build_adapter_registry())


def test_explicit_type_with_missing_resources_directory_is_fatal(tmp_path: Path) -> None:
    location = Location(name="docs", base_path=tmp_path, adapter_type="acdc-mcp")

    with pytest.raises(StartupError, match="resource discovery failed"):
        discover_content([location], build_adapter_registry())
