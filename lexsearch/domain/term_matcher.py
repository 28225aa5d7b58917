# lexsearch/domain/term_matcher.py
#
# Both functions expect the term already normalized by SearchQuery.parse().


def matches(paragraph: str, normalized_term: str) -> bool:
    """Case-insensitive substring test."""
    _require_term(normalized_term)
    return normalized_term in paragraph.lower()


def count_occurrences(paragraph: str, normalized_term: str) -> int:
    """
    Count non-overlapping hits, scanning left to right.
    "aaaa" contains "aa" twice, not three times.
    """
    _require_term(normalized_term)
    return paragraph.lower().count(normalized_term)


def _require_term(normalized_term: str) -> None:
    if not normalized_term:
        raise ValueError("Term matcher called with an empty term.")
