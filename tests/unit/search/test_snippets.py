from __future__ import annotations

from acdc_mcp.resources import Document
from acdc_mcp.search import SearchIndex, build_snippet, stem, tokenize


def _words(count: int) -> str:
    return " ".join(f"w{n}" for n in range(count))


def test_short_content_is_highlighted_in_full() -> None:
    content = "Install the operator\nfirst."

    snippet = build_snippet(content, tokenize(content), {stem("operator")})

    assert snippet == "Install the **operator** first."


def test_long_content_is_windowed_with_ellipses() -> None:
    content = _words(100)

    snippet = build_snippet(content, tokenize(content), {"w60"})

    assert snippet.startswith("... w55 ")
    assert snippet.endswith(" w84 ...")
    assert "**w60**" in snippet
    assert "w85" not in snippet


def test_window_follows_densest_cluster() -> None:
    content = _words(100)

    snippet = build_snippet(content, tokenize(content), {"w2", "w50", "w52", "w54"})

    assert "**w50**" in snippet
    assert "**w52**" in snippet
    assert "**w54**" in snippet
    assert "w2 " not in snippet


def test_unmatched_content_falls_back_to_leading_text() -> None:
    content = _words(40)

    snippet = build_snippet(content, tokenize(content), set())

    assert snippet.startswith("w0 w1 ")
    assert snippet.endswith(" w29 ...")
    assert "**" not in snippet


def test_empty_content_gives_empty_snippet() -> None:
    assert build_snippet("", [], {"x"}) == ""


def test_search_results_carry_snippets() -> None:
    index = SearchIndex()
    index.index(
        [
            Document(
                uri="acdc://d/page",
                name="Page",
                content="Intro text.\n\nThe retry policy backs off exponentially.",
                source="d",
            )
        ]
    )

    result = index.search("retry")[0]

    assert "**retry**" in result.snippet
    assert result.snippet.endswith("exponentially.")
