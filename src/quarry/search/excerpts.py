"""Context windows around every occurrence of a query in a document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

DEFAULT_MARGIN = 20


@dataclass(slots=True)
class Excerpt:
    """A slice of document content surrounding one match."""

    source: str
    text: str


def extract_excerpts(
    content: str, query: str, source: str, *, margin: int = DEFAULT_MARGIN
) -> List[Excerpt]:
    """Return one excerpt per case-insensitive, non-overlapping occurrence of ``query``.

    Each window spans ``margin`` characters on both sides of the match, clipped
    to the content. Matches are reported left to right; a match that falls
    inside the previous window still gets its own excerpt.
    """
    if not content or not query or not query.strip():
        return []

    # Matching against the original text keeps offsets valid even where
    # lowercasing would change the string length
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    length = len(content)
    excerpts: List[Excerpt] = []
    for match in pattern.finditer(content):
        start = max(0, match.start() - margin)
        end = min(length, match.end() + margin)
        excerpts.append(Excerpt(source=source, text=content[start:end]))
    return excerpts
