# tests/test_term_matcher.py

import pytest

from lexsearch.domain.term_matcher import count_occurrences, matches


def test_matches_is_case_insensitive():
    assert matches("The Quick Brown Fox", "quick") is True
    assert matches("THE QUICK BROWN FOX", "brown fox") is True


def test_matches_false_without_term():
    assert matches("nothing to see", "fox") is False


def test_matches_substring_inside_word():
    assert matches("Searchterms everywhere", "searchterm") is True


def test_count_occurrences_counts_every_hit():
    assert count_occurrences("Term, term and TERM", "term") == 3


def test_count_occurrences_is_non_overlapping():
    assert count_occurrences("aaaa", "aa") == 2
    assert count_occurrences("aaa", "aa") == 1


def test_count_occurrences_zero_when_absent():
    assert count_occurrences("para one", "missing") == 0


@pytest.mark.parametrize("paragraph", ["alpha beta", "beta beta", "no match", ""])
def test_matches_iff_count_positive(paragraph):
    assert matches(paragraph, "beta") == (count_occurrences(paragraph, "beta") > 0)


def test_empty_term_is_rejected():
    with pytest.raises(ValueError, match="empty term"):
        matches("anything", "")
    with pytest.raises(ValueError, match="empty term"):
        count_occurrences("anything", "")
