# tests/test_search_service.py

import pytest

from lexsearch.application import search_service as search_service_module
from lexsearch.application.search_service import UNAVAILABLE_REASON, LexicalSearchService
from lexsearch.domain.errors import InvalidQueryError
from lexsearch.domain.models import SearchSession, SectionDecision


def _make_session(contents: dict) -> SearchSession:
    return LexicalSearchService().with_documents(SearchSession(), contents)


def test_search_without_matches():
    service = LexicalSearchService()
    session = _make_session({"doc.md": "para one\n\npara two\n\npara three"})

    result_session = service.search(session, "searchterm")
    result = result_session.results[0]

    assert result.total_paragraph_count == 3
    assert result.found_paragraphs == ()
    assert result.occurrence_count == 0


def test_search_restructures_and_counts_on_original_text():
    service = LexicalSearchService()
    session = _make_session({
        "doc.md": (
            "Intro | has searchterm here | no match | also searchterm"
            "\n\nanother SearchTerm paragraph"
            "\n\nnothing to see"
        ),
    })

    result = service.search(session, "searchterm").results[0]

    assert result.found_paragraphs == (
        "Intro has searchterm here also searchterm",
        "another SearchTerm paragraph",
    )
    assert result.occurrence_count == 3
    assert result.total_paragraph_count == 3


def test_occurrences_in_pruned_text_still_count():
    service = LexicalSearchService()
    session = _make_session({"doc.md": "alpha | beta gamma | delta"})

    result = service.search(session, "gamma | delta").results[0]

    assert result.found_paragraphs == ("alpha",)
    assert result.occurrence_count == 1


def test_occurrence_count_is_at_least_found_paragraphs():
    service = LexicalSearchService()
    session = _make_session({
        "a.md": "x term\n\ny term term\n\nz",
        "b.md": "term | term | term",
    })

    for result in service.search(session, "term").results:
        assert result.occurrence_count >= len(result.found_paragraphs)


@pytest.mark.parametrize("term", ["", "   ", "\t\n"])
def test_search_raises_on_empty_term(term):
    service = LexicalSearchService()
    session = _make_session({"doc.md": "anything"})

    with pytest.raises(InvalidQueryError, match="empty"):
        service.search(session, term)


def test_term_is_normalized_once():
    service = LexicalSearchService()
    session = _make_session({"doc.md": "Find the Needle"})

    result_session = service.search(session, "  NeEdLe ")

    assert result_session.query.term == "NeEdLe"
    assert result_session.query.normalized == "needle"
    assert result_session.results[0].found_paragraphs == ("Find the Needle",)


def test_empty_selection_performs_no_work(monkeypatch):
    calls = []
    monkeypatch.setattr(
        search_service_module,
        "split_paragraphs",
        lambda text: calls.append(text),
    )
    service = LexicalSearchService()
    session = _make_session({"doc.md": "term"})

    result_session = service.search(session, "term", identifiers=[])

    assert result_session.results == ()
    assert calls == []


def test_unknown_document_is_skipped_not_fatal():
    service = LexicalSearchService()
    session = _make_session({"a.md": "term here"})

    result_session = service.search(session, "term", identifiers=["missing.md", "a.md"])

    assert [r.document_identifier for r in result_session.results] == ["a.md"]
    assert result_session.skipped[0].identifier == "missing.md"
    assert result_session.skipped[0].reason == UNAVAILABLE_REASON


def test_failure_in_one_document_does_not_abort_batch(monkeypatch):
    original = search_service_module.split_paragraphs

    def flaky_split(raw_text):
        if raw_text == "boom":
            raise RuntimeError("unreadable content")
        return original(raw_text)

    monkeypatch.setattr(search_service_module, "split_paragraphs", flaky_split)
    service = LexicalSearchService()
    session = _make_session({"bad.md": "boom", "good.md": "term"})

    result_session = service.search(session, "term")

    assert [r.document_identifier for r in result_session.results] == ["good.md"]
    assert result_session.skipped[0].identifier == "bad.md"
    assert "unreadable content" in result_session.skipped[0].reason


def test_results_follow_selection_order():
    service = LexicalSearchService()
    session = _make_session({"a.md": "term", "b.md": "term", "c.md": "term"})

    result_session = service.search(session, "term", identifiers=["c.md", "a.md"])

    assert [r.document_identifier for r in result_session.results] == ["c.md", "a.md"]


def test_statistics_aggregate_all_documents():
    service = LexicalSearchService()
    session = _make_session({
        "a.md": "term one\n\nterm two term",
        "b.md": "nothing",
    })

    stats = service.search(session, "term").statistics

    assert stats.document_count == 2
    assert stats.total_found_paragraphs == 2
    assert stats.total_occurrences == 3


def test_search_leaves_input_session_untouched():
    service = LexicalSearchService()
    session = _make_session({"a.md": "term"})

    result_session = service.search(session, "term")

    assert session.results == ()
    assert session.query is None
    assert result_session.documents == session.documents


def test_diagnostics_and_traces_are_collected():
    service = LexicalSearchService()
    session = _make_session({"a.md": "base | term one | other\n\nplain term"})

    result_session = service.search(session, "term")

    identifier, diagnostics = result_session.segmentation[0]
    assert identifier == "a.md"
    assert diagnostics.chosen_method.startswith("Double newline")

    assert len(result_session.traces) == 2
    first, second = result_session.traces
    assert first.paragraph_index == 1
    assert [d for _, d in first.sections] == [
        SectionDecision.BASE,
        SectionDecision.MATCH,
        SectionDecision.SKIP,
    ]
    assert second.triggered is False


def test_with_documents_replaces_by_identifier():
    service = LexicalSearchService()
    session = _make_session({"a.md": "old", "b.md": "keep"})

    updated = service.with_documents(session, {"a.md": "new"})

    assert updated.document_identifiers() == ["a.md", "b.md"]
    assert updated.get_document("a.md").raw_text == "new"


def test_repeated_identifiers_are_searched_once():
    service = LexicalSearchService()
    session = _make_session({"a.md": "one term here", "b.md": "term"})

    result_session = service.search(session, "term", ["b.md", "a.md", "b.md", "a.md"])

    assert [r.document_identifier for r in result_session.results] == ["b.md", "a.md"]
    assert result_session.statistics.document_count == 2
    assert result_session.statistics.total_occurrences == 2
