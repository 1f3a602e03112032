from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from acdc_mcp.adapters import (
    AdapterNotFoundError,
    AdapterRegistry,
    Location,
    build_adapter_registry,
)


@dataclass(slots=True)
class MarkerAdapter:
    name: str
    marker: str

    def can_handle(self, base_path: Path) -> bool:
        return (base_path / self.marker).exists()

    def discover_resources(self, location: Location) -> list[object]:
        _ = location
        return []

    def discover_prompts(self, location: Location) -> list[object]:
        _ = location
        return []


def test_auto_detect_selects_first_matching_adapter_in_registration_order(
    tmp_path: Path,
) -> None:
    (tmp_path / "shared").mkdir()
    registry = AdapterRegistry()
    registry.register(MarkerAdapter(name="first", marker="shared"))
    registry.register(MarkerAdapter(name="second", marker="shared"))

    assert registry.auto_detect(tmp_path).name == "first"
    assert registry.names() == ("first", "second")


def test_auto_detect_raises_when_nothing_matches(tmp_path: Path) -> None:
    registry = AdapterRegistry()
    registry.register(MarkerAdapter(name="only", marker="missing"))

    with pytest.raises(AdapterNotFoundError, match="no adapter recognizes"):
        registry.auto_detect(tmp_path)


def test_get_returns_none_for_unknown_name() -> None:
    registry = build_adapter_registry()

    assert registry.get("acdc-mcp") is not None
    assert registry.get("nope") is None


def test_reregistering_a_name_replaces_in_place(tmp_path: Path) -> None:
    registry = AdapterRegistry()
    registry.register(MarkerAdapter(name="a", marker="x"))
    registry.register(MarkerAdapter(name="b", marker="y"))
    registry.register(MarkerAdapter(name="a", marker="z"))

    assert registry.names() == ("a", "b")
    adapter = registry.get("a")
    assert isinstance(adapter, MarkerAdapter)
    assert adapter.marker == "z"


def test_standard_registry_prefers_native_over_legacy(tmp_path: Path) -> None:
    (tmp_path / "resources").mkdir()
    (tmp_path / "mcp-resources").mkdir()
    registry = build_adapter_registry()

    assert registry.names() == ("acdc-mcp", "legacy")
    assert registry.auto_detect(tmp_path).name == "acdc-mcp"


def test_standard_registry_detects_legacy_layout(tmp_path: Path) -> None:
    (tmp_path / "mcp-resources").mkdir()

    assert build_adapter_registry().auto_detect(tmp_path).name == "legacy"


def test_can_handle_requires_a_directory(tmp_path: Path) -> None:
    (tmp_path / "resources").write_text("not a directory", encoding="utf-8")
    registry = build_adapter_registry()

    adapter = registry.get("acdc-mcp")
    assert adapter is not None
    assert adapter.can_handle(tmp_path) is False
    assert adapter.can_handle(tmp_path / "does-not-exist") is False
