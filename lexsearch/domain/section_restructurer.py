# lexsearch/domain/section_restructurer.py

from typing import List, Tuple

from .models import RestructureTrace, SectionDecision


SECTION_DELIMITER = "|"
MIN_SECTIONS = 3  # i.e. at least two pipes


def restructure(paragraph_text: str, normalized_term: str) -> str:
    final_text, _ = restructure_with_trace(paragraph_text, normalized_term)
    return final_text


def restructure_with_trace(
    paragraph_text: str,
    normalized_term: str,
    document_identifier: str = "",
    paragraph_index: int = 0,
) -> Tuple[str, RestructureTrace]:
    """
    Keep the first pipe-delimited section plus every later section that
    contains the term, joined by single spaces in original order.

    Paragraphs with fewer than two pipes are returned unchanged, untrimmed,
    as are paragraphs whose kept sections are all empty.
    """
    parts = paragraph_text.split(SECTION_DELIMITER)
    contains_pipe = SECTION_DELIMITER in paragraph_text

    decisions: List[Tuple[str, SectionDecision]] = []
    if contains_pipe and len(parts) >= MIN_SECTIONS:
        sections = [part.strip() for part in parts]
        kept = [sections[0]]
        decisions.append((sections[0], SectionDecision.BASE))

        for section in sections[1:]:
            if normalized_term in section.lower():
                kept.append(section)
                decisions.append((section, SectionDecision.MATCH))
            else:
                decisions.append((section, SectionDecision.SKIP))

        # An all-empty result keeps the paragraph as it was.
        final_text = " ".join(section for section in kept if section) or paragraph_text
    else:
        final_text = paragraph_text

    trace = RestructureTrace(
        document_identifier=document_identifier,
        paragraph_index=paragraph_index,
        original_paragraph=paragraph_text,
        normalized_term=normalized_term,
        contains_pipe=contains_pipe,
        split_count=len(parts),
        sections=tuple(decisions),
        final_paragraph=final_text,
    )
    return final_text, trace
