"""Text analysis: tokenization with offsets and Porter stemming."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from nltk.stem.porter import PorterStemmer

TOKEN_PATTERN = re.compile(r"\w+")

_STEMMER = PorterStemmer()


@dataclass(slots=True, frozen=True)
class Token:
    """Lowercased term with its stem and character span in the source text."""

    term: str
    stem: str
    start: int
    end: int


@lru_cache(maxsize=65_536)
def stem(term: str) -> str:
    """Return the Porter stem of a lowercase term."""
    return _STEMMER.stem(term)


def tokenize(text: str) -> list[Token]:
    """Split text into lowercase word tokens with offsets."""
    tokens: list[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        term = match.group(0).lower()
        tokens.append(Token(term=term, stem=stem(term), start=match.start(), end=match.end()))
    return tokens


def query_terms(text: str) -> list[str]:
    """Return unique lowercase query terms in first-seen order."""
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(text):
        seen.setdefault(match.group(0).lower(), None)
    return list(seen)
