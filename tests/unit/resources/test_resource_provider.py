from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from acdc_mcp.cancellation import OperationCancelledError
from acdc_mcp.resources import (
    ResourceDefinition,
    ResourceNotFoundError,
    ResourceProvider,
    ResourceUnavailableError,
    build_crossref_transformer,
    build_resource_uri,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _definition(tmp_path: Path, relative: str, body: str, name: str = "Doc") -> ResourceDefinition:
    path = _write(
        tmp_path / "resources" / relative,
        f"---\nname: {name}\ndescription: d\n---\n{body}",
    )
    return ResourceDefinition(
        uri=build_resource_uri("acdc", "docs", relative),
        name=name,
        description="d",
        file_path=str(path),
        source="docs",
        keywords=("k",),
    )


def test_build_resource_uri_drops_extension_and_normalizes_separators() -> None:
    assert build_resource_uri("acdc", "docs", "guides/intro.md") == "acdc://docs/guides/intro"
    assert build_resource_uri("acdc", "docs", "guides\\intro.md") == "acdc://docs/guides/intro"
    assert build_resource_uri("kb", "docs", "a.b.md") == "kb://docs/a.b"


def test_distinct_paths_give_distinct_uris() -> None:
    paths = ["a.md", "a/b.md", "a-b.md", "a_b.md", "b/a.md"]

    uris = {build_resource_uri("acdc", "docs", path) for path in paths}

    assert len(uris) == len(paths)


def test_read_resource_strips_frontmatter(tmp_path: Path) -> None:
    definition = _definition(tmp_path, "page.md", "# Page\nText\n")
    provider = ResourceProvider([definition])

    assert provider.read_resource(definition.uri) == "# Page\nText\n"


def test_read_resource_applies_transformer(tmp_path: Path) -> None:
    target = _definition(tmp_path, "target.md", "target body")
    current = _definition(tmp_path, "current.md", "see [t](target.md)")
    transformer = build_crossref_transformer([target, current], "acdc")
    provider = ResourceProvider([target, current], transformer=transformer)

    assert provider.read_resource(current.uri) == "see [t](acdc://docs/target)"


def test_read_unknown_uri_raises_not_found(tmp_path: Path) -> None:
    provider = ResourceProvider([_definition(tmp_path, "page.md", "x")])

    with pytest.raises(ResourceNotFoundError, match="acdc://docs/missing"):
        provider.read_resource("acdc://docs/missing")


def test_duplicate_uri_keeps_first_definition(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    first = _definition(tmp_path, "page.md", "first", name="First")
    second = ResourceDefinition(
        uri=first.uri,
        name="Second",
        description="d",
        file_path=str(tmp_path / "elsewhere.md"),
        source="docs",
    )

    with caplog.at_level(logging.WARNING):
        provider = ResourceProvider([first, second])

    assert [definition.name for definition in provider.list_resources()] == ["First"]
    assert provider.get(first.uri) == first
    assert provider.read_resource(first.uri) == "first"
    assert any("duplicate resource" in record.message for record in caplog.records)


def test_stream_resources_yields_rendered_documents_in_order(tmp_path: Path) -> None:
    one = _definition(tmp_path, "one.md", "body one", name="One")
    two = _definition(tmp_path, "two.md", "body two", name="Two")
    provider = ResourceProvider([one, two])

    documents = list(provider.stream_resources())

    assert [(doc.uri, doc.name, doc.content) for doc in documents] == [
        ("acdc://docs/one", "One", "body one"),
        ("acdc://docs/two", "Two", "body two"),
    ]
    assert documents[0].keywords == ("k",)
    assert documents[0].source == "docs"


def test_stream_resources_skips_unreadable_files(tmp_path: Path) -> None:
    one = _definition(tmp_path, "one.md", "body one", name="One")
    gone = _definition(tmp_path, "gone.md", "body gone", name="Gone")
    Path(gone.file_path).unlink()
    provider = ResourceProvider([gone, one])

    assert [doc.name for doc in provider.stream_resources()] == ["One"]


def test_read_of_deleted_file_raises_unavailable_with_uri(tmp_path: Path) -> None:
    gone = _definition(tmp_path, "gone.md", "body gone", name="Gone")
    Path(gone.file_path).unlink()
    provider = ResourceProvider([gone])

    with pytest.raises(ResourceUnavailableError, match="docs/gone could not be read") as info:
        provider.read_resource(gone.uri)

    assert info.value.uri == "acdc://docs/gone"
    assert isinstance(info.value.__cause__, FileNotFoundError)


def test_stream_resources_stops_when_cancelled(tmp_path: Path) -> None:
    one = _definition(tmp_path, "one.md", "body one", name="One")
    two = _definition(tmp_path, "two.md", "body two", name="Two")
    provider = ResourceProvider([one, two])
    cancel = threading.Event()
    stream = provider.stream_resources(cancel)

    assert next(stream).name == "One"
    cancel.set()
    with pytest.raises(OperationCancelledError):
        next(stream)
