"""Full-text search over rendered resources."""

from .analysis import Token, query_terms, stem, tokenize
from .index import (
    IndexClosedError,
    SearchIndex,
    SearchOptions,
    SearchResult,
    SearchSettings,
)
from .snippets import build_snippet

__all__ = [
    "IndexClosedError",
    "SearchIndex",
    "SearchOptions",
    "SearchResult",
    "SearchSettings",
    "Token",
    "build_snippet",
    "query_terms",
    "stem",
    "tokenize",
]
