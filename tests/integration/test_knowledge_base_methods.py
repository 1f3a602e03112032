from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from acdc_mcp.config import CliOverrides
from acdc_mcp.server import StdioServer, create_server


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture()
def server(tmp_path: Path) -> Iterator[StdioServer]:
    _write(
        tmp_path / "content" / "docs" / "resources" / "guides" / "intro.md",
        "---\nname: Introduction\ndescription: Start here\n---\n"
        "Read the [setup notes](../tutorials/setup.md#install) before anything else.\n",
    )
    _write(
        tmp_path / "content" / "docs" / "resources" / "tutorials" / "setup.md",
        "---\nname: Setup\ndescription: Installing the agent\nkeywords: [installation]\n---\n"
        "Install the agent with the package manager.\n",
    )
    _write(
        tmp_path / "content" / "docs" / "prompts" / "summarize.md",
        "---\nname: summarize\ndescription: Summarize a topic\narguments:\n"
        "  - name: topic\n    description: What to summarize\n"
        "  - name: tone\n    required: false\n---\n"
        "Summarize {{ .topic }} in a {{ tone }} tone.\n",
    )
    _write(
        tmp_path / "content" / "legacy" / "mcp-resources" / "faq.md",
        "---\nname: FAQ\ndescription: Frequently asked\n---\nHow do I install the agent?\n",
    )
    config_path = tmp_path / "acdc_mcp.toml"
    config_path.write_text(
        "\n".join(
            [
                "cross_ref = true",
                "",
                "[server]",
                'instructions = "Answer from the docs."',
                "",
                "[[content]]",
                'name = "docs"',
                'description = "Product documentation"',
                'path = "content/docs"',
                "",
                "[[content]]",
                'name = "legacy"',
                'description = "Old FAQ"',
                'path = "content/legacy"',
                "",
                "[[tools]]",
                'name = "read"',
                'description = "Fetch a document."',
            ]
        ),
        encoding="utf-8",
    )
    created = create_server(config_path=str(config_path))
    yield created
    created.close()


def _call(server: StdioServer, method: str, params: dict[str, object]) -> dict[str, object]:
    return server.handle_payload({"id": "req-test", "method": method, "params": params})


def test_server_info_lists_sources_in_instructions(server: StdioServer) -> None:
    result = _call(server, "server/info", {})["result"]

    assert result["instructions"] == "\n".join(
        [
            "Answer from the docs.",
            "",
            "Available content sources:",
            "- docs: Product documentation",
            "- legacy: Old FAQ",
            "",
            "Use the search tool to find information. You can optionally filter by source.",
        ]
    )
    assert [source["name"] for source in result["sources"]] == ["docs", "legacy"]
    assert result["effective_config"]["cross_ref"] is True


def test_resources_list_in_discovery_order(server: StdioServer) -> None:
    resources = _call(server, "resources/list", {})["result"]["resources"]

    assert [resource["uri"] for resource in resources] == [
        "acdc://docs/guides/intro",
        "acdc://docs/tutorials/setup",
        "acdc://legacy/faq",
    ]
    assert resources[0]["mime_type"] == "text/markdown"


def test_resources_read_rewrites_cross_references(server: StdioServer) -> None:
    response = _call(server, "resources/read", {"uri": "acdc://docs/guides/intro"})

    contents = response["result"]["contents"]
    assert contents[0]["text"] == (
        "Read the [setup notes](acdc://docs/tutorials/setup#install) before anything else.\n"
    )


def test_resources_read_unknown_uri_is_not_found(server: StdioServer) -> None:
    response = _call(server, "resources/read", {"uri": "acdc://docs/missing"})

    assert response["ok"] is False
    assert response["error"]["code"] == "NOT_FOUND"


def test_resource_deleted_after_startup_reports_read_failed(
    tmp_path: Path, server: StdioServer
) -> None:
    (tmp_path / "content" / "docs" / "resources" / "tutorials" / "setup.md").unlink()

    direct = _call(server, "resources/read", {"uri": "acdc://docs/tutorials/setup"})
    via_tool = _call(
        server, "tools/call", {"name": "read", "arguments": {"uri": "acdc://docs/tutorials/setup"}}
    )

    for response in (direct, via_tool):
        assert response["ok"] is False
        assert response["error"]["code"] == "READ_FAILED"
        assert "acdc://docs/tutorials/setup" in response["error"]["message"]


def test_prompts_list_and_get(server: StdioServer) -> None:
    prompts = _call(server, "prompts/list", {})["result"]["prompts"]

    assert [prompt["name"] for prompt in prompts] == ["docs:summarize"]
    assert prompts[0]["arguments"] == [
        {"name": "topic", "description": "What to summarize", "required": True},
        {"name": "tone", "description": "", "required": False},
    ]

    response = _call(server, "prompts/get", {"name": "docs:summarize", "arguments": {"topic": "X"}})
    message = response["result"]["messages"][0]
    assert message["content"]["text"] == "Summarize X in a  tone.\n"


def test_prompts_get_errors(server: StdioServer) -> None:
    missing_argument = _call(server, "prompts/get", {"name": "docs:summarize"})
    unknown = _call(server, "prompts/get", {"name": "docs:nope"})
    bad_arguments = _call(
        server, "prompts/get", {"name": "docs:summarize", "arguments": {"topic": 1}}
    )

    assert missing_argument["error"] == {
        "code": "INVALID_PARAMS",
        "message": "missing required argument: topic",
    }
    assert unknown["error"]["code"] == "NOT_FOUND"
    assert bad_arguments["error"]["code"] == "INVALID_PARAMS"


def test_search_tool_ranks_and_filters_by_source(server: StdioServer) -> None:
    everything = _call(
        server, "tools/call", {"name": "search", "arguments": {"query": "install"}}
    )["result"]
    legacy_only = _call(
        server,
        "tools/call",
        {"name": "search", "arguments": {"query": "install", "source": "legacy"}},
    )["result"]

    assert everything["results"][0]["uri"] == "acdc://docs/tutorials/setup"
    assert {hit["source"] for hit in everything["results"]} == {"docs", "legacy"}
    assert [hit["uri"] for hit in legacy_only["results"]] == ["acdc://legacy/faq"]
    assert legacy_only["text"].startswith("Search results for 'install' in source 'legacy':")


def test_indexed_content_is_cross_referenced(server: StdioServer) -> None:
    result = _call(
        server, "tools/call", {"name": "search", "arguments": {"query": "setup notes"}}
    )["result"]

    intro = [hit for hit in result["results"] if hit["name"] == "Introduction"][0]
    assert "**setup**" in intro["snippet"]
    assert "**notes**" in intro["snippet"]


def test_read_tool_and_description_override(server: StdioServer) -> None:
    tools = _call(server, "tools/list", {})["result"]["tools"]
    read = _call(server, "tools/call", {"name": "read", "arguments": {"uri": "acdc://legacy/faq"}})

    assert [tool["name"] for tool in tools] == ["search", "read"]
    assert tools[1]["description"] == "Fetch a document."
    assert read["result"]["text"] == "How do I install the agent?\n"


def test_overrides_disable_cross_references(tmp_path: Path, server: StdioServer) -> None:
    config_path = tmp_path / "acdc_mcp.toml"
    plain = create_server(str(config_path), CliOverrides(cross_ref=False))
    try:
        text = _call(plain, "resources/read", {"uri": "acdc://docs/guides/intro"})["result"][
            "contents"
        ][0]["text"]
    finally:
        plain.close()

    assert "(../tutorials/setup.md#install)" in text
