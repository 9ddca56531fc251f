"""Naive keyword search over cached raw document text."""

import re
from typing import Optional

import constants
from models.cache_entry import CacheSnapshot, SearchHit

# paragraphs are separated by at least one blank (or whitespace only) line
SEGMENT_SEPARATOR = re.compile(r"\n[ \t\r\f\v]*\n")
# line placed between two sources of one category, it is not document text
SOURCE_DELIMITER_LINE = re.compile(
    re.escape(constants.SOURCE_DELIMITER.strip()).replace(
        re.escape("{document_id}"), r"[A-Za-z0-9_-]+"
    )
)


def split_segments(text: str) -> list[str]:
    """Split text into paragraph-like segments on blank lines.

    Source delimiters are not returned as segments.
    """
    segments = (segment.strip() for segment in SEGMENT_SEPARATOR.split(text))
    return [
        segment
        for segment in segments
        if segment and not SOURCE_DELIMITER_LINE.fullmatch(segment)
    ]


def find_matches(
    text: str, query: str, max_matches: int = constants.DEFAULT_MAX_MATCHES_PER_CATEGORY
) -> list[str]:
    """Return first segments containing the query, case-insensitively."""
    if not query.strip():
        return []
    needle = query.lower()
    matches: list[str] = []
    for segment in split_segments(text):
        if needle in segment.lower():
            matches.append(segment)
            if len(matches) >= max_matches:
                break
    return matches


def search_documents(
    snapshot: CacheSnapshot,
    query: str,
    category: Optional[str] = None,
    max_matches: int = constants.DEFAULT_MAX_MATCHES_PER_CATEGORY,
) -> list[SearchHit]:
    """
    Search raw text of cached categories.

    Parameters:
        snapshot: Document cache snapshot to search in.
        query: Substring to look for; no tokenization is performed.
        category: When set, only this category is searched.
        max_matches: Maximal number of segments returned per category.

    Returns:
        list[SearchHit]: One hit group per category with at least one match,
        in category order of the snapshot.
    """
    if category is not None:
        entry = snapshot.entries.get(category)
        entries = [entry] if entry is not None else []
    else:
        entries = list(snapshot.entries.values())

    hits = []
    for entry in entries:
        matches = find_matches(entry.raw_text, query, max_matches)
        if matches:
            hits.append(SearchHit(category=entry.category, matches=matches))
    return hits
