# lexsearch/application/search_service.py

from typing import Iterable, List, Mapping, Optional, Tuple

from lexsearch.domain.models import (
    Document,
    MatchResult,
    RestructureTrace,
    SearchQuery,
    SearchSession,
    SegmentationDiagnostics,
    SkippedDocument,
)
from lexsearch.domain.section_restructurer import restructure_with_trace
from lexsearch.domain.segmentation import split_paragraphs
from lexsearch.domain.term_matcher import count_occurrences, matches


UNAVAILABLE_REASON = "document unavailable"


class LexicalSearchService:
    """
    Core use case: find every paragraph containing a term, across a set of
    documents, and restructure pipe-delimited matches.

    Pipeline per document:
    raw text → paragraphs → term filter + occurrence count → restructure

    The service holds no state between calls. Everything it needs arrives in
    a SearchSession and everything it produces leaves in a new one.
    """

    def with_documents(
        self,
        session: SearchSession,
        contents: Mapping[str, str],
    ) -> SearchSession:
        """Add already-decoded documents, keyed by identifier."""
        documents = [Document(identifier=name, raw_text=text) for name, text in contents.items()]
        return session.with_documents(documents)

    def search(
        self,
        session: SearchSession,
        term: str,
        identifiers: Optional[Iterable[str]] = None,
    ) -> SearchSession:
        """
        Run one search. `identifiers=None` searches every document in the
        session; an explicit empty selection performs no work.

        Raises InvalidQueryError for an empty or whitespace-only term.
        """
        query = SearchQuery.parse(term)
        if identifiers is None:
            selected = session.document_identifiers()
        else:
            # Repeated identifiers are searched once, in first-seen order.
            selected = list(dict.fromkeys(identifiers))

        if not selected:
            print("[SearchService] No documents selected, nothing to search.")
            return SearchSession(documents=session.documents, query=query)

        results: List[MatchResult] = []
        segmentation: List[Tuple[str, SegmentationDiagnostics]] = []
        traces: List[RestructureTrace] = []
        skipped: List[SkippedDocument] = []

        for identifier in selected:
            document = session.get_document(identifier)
            if document is None:
                print(f"[SearchService] ⚠ Skipping '{identifier}': {UNAVAILABLE_REASON}")
                skipped.append(SkippedDocument(identifier=identifier, reason=UNAVAILABLE_REASON))
                continue

            try:
                result, diagnostics, document_traces = self._search_document(document, query)
            except Exception as error:
                print(f"[SearchService] ⚠ Failed to analyze '{identifier}': {error}")
                skipped.append(SkippedDocument(identifier=identifier, reason=str(error)))
                continue

            results.append(result)
            segmentation.append((identifier, diagnostics))
            traces.extend(document_traces)

        print(
            f"[SearchService] '{query.normalized}': "
            f"{sum(len(r.found_paragraphs) for r in results)} paragraphs in "
            f"{len(results)} document(s), {len(skipped)} skipped."
        )
        return SearchSession(
            documents=session.documents,
            query=query,
            results=tuple(results),
            segmentation=tuple(segmentation),
            traces=tuple(traces),
            skipped=tuple(skipped),
        )

    @staticmethod
    def _search_document(
        document: Document,
        query: SearchQuery,
    ) -> Tuple[MatchResult, SegmentationDiagnostics, List[RestructureTrace]]:
        paragraphs, diagnostics = split_paragraphs(document.raw_text)

        found: List[str] = []
        traces: List[RestructureTrace] = []
        occurrences = 0

        for paragraph in paragraphs:
            if not matches(paragraph.text, query.normalized):
                continue

            # Counted on the original text so pruned sections still count.
            occurrences += count_occurrences(paragraph.text, query.normalized)
            final_text, trace = restructure_with_trace(
                paragraph.text,
                query.normalized,
                document_identifier=document.identifier,
                paragraph_index=paragraph.index,
            )
            found.append(final_text)
            traces.append(trace)

        result = MatchResult(
            document_identifier=document.identifier,
            found_paragraphs=tuple(found),
            total_paragraph_count=len(paragraphs),
            occurrence_count=occurrences,
        )
        return result, diagnostics, traces
