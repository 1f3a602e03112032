from __future__ import annotations

from acdc_mcp.resources import Document
from acdc_mcp.search import SearchIndex


def test_equal_scores_keep_ingestion_order() -> None:
    documents = [
        Document(uri=f"acdc://d/{name}", name="Same", content="identical body text", source="d")
        for name in ("c", "a", "b")
    ]
    index = SearchIndex()
    index.index(documents)

    first = [result.uri for result in index.search("identical")]
    second = [result.uri for result in index.search("identical")]

    assert first == ["acdc://d/c", "acdc://d/a", "acdc://d/b"]
    assert first == second
