# lexsearch/domain/segmentation.py

import re
from typing import Callable, List, Tuple

from .models import Paragraph, SegmentationDiagnostics, SplitCandidate


DOUBLE_NEWLINE = "Double newline (\\n\\n)"
SINGLE_NEWLINE = "Single newline (\\n)"
TRIPLE_NEWLINE = "Triple newline (\\n\\n\\n)"
MULTI_NEWLINE = "Regex: 2+ newlines"

# Compatibility thresholds for choosing a candidate split. Keep as-is.
MIN_PARAGRAPHS = 3
MAX_PARAGRAPHS = 50
MIN_PARAGRAPH_LENGTH = 20

SAMPLE_SIZE = 3
SAMPLE_PREVIEW_CHARS = 100

_MULTI_NEWLINE_RE = re.compile(r"\n{2,}")

_SPLITTERS: List[Tuple[str, Callable[[str], List[str]]]] = [
    (DOUBLE_NEWLINE, lambda text: text.split("\n\n")),
    (SINGLE_NEWLINE, lambda text: text.split("\n")),
    (TRIPLE_NEWLINE, lambda text: text.split("\n\n\n")),
    (MULTI_NEWLINE, lambda text: _MULTI_NEWLINE_RE.split(text)),
]


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def segment(raw_text: str) -> Tuple[List[str], SegmentationDiagnostics]:
    """
    Split raw document text into paragraphs.

    All four candidate splits are computed; the double-newline split is
    preferred unless it yields fewer than 3 paragraphs and the single-newline
    split yields more. A choice with more than 50 paragraphs, any of them
    shorter than 20 characters, falls back to the double-newline split.
    Kept paragraphs are not trimmed, only whitespace-only ones are dropped.
    """
    normalized = normalize_line_endings(raw_text)

    candidates = [
        (name, [p for p in splitter(normalized) if p.strip()])
        for name, splitter in _SPLITTERS
    ]
    default_name, default_result = candidates[0]
    _, single_result = candidates[1]

    chosen_name, chosen_result = default_name, default_result
    if len(default_result) < MIN_PARAGRAPHS and len(single_result) > len(default_result):
        chosen_name, chosen_result = candidates[1]

    if len(chosen_result) > MAX_PARAGRAPHS and any(
        len(p) < MIN_PARAGRAPH_LENGTH for p in chosen_result
    ):
        chosen_name, chosen_result = default_name, default_result

    diagnostics = SegmentationDiagnostics(
        chosen_method=chosen_name,
        original_length=len(raw_text),
        normalized_length=len(normalized),
        has_carriage_returns="\r" in raw_text,
        has_windows_line_endings="\r\n" in raw_text,
        double_newline_count=normalized.count("\n\n"),
        single_newline_count=normalized.count("\n"),
        candidates=tuple(_describe(name, result) for name, result in candidates),
    )
    return list(chosen_result), diagnostics


def split_paragraphs(raw_text: str) -> Tuple[List[Paragraph], SegmentationDiagnostics]:
    texts, diagnostics = segment(raw_text)
    paragraphs = [Paragraph(index=i, text=t) for i, t in enumerate(texts, start=1)]
    return paragraphs, diagnostics


def _describe(name: str, result: List[str]) -> SplitCandidate:
    average = _round_half_up(sum(len(p) for p in result) / len(result)) if result else 0
    sample = tuple(
        p[:SAMPLE_PREVIEW_CHARS] + ("..." if len(p) > SAMPLE_PREVIEW_CHARS else "")
        for p in result[:SAMPLE_SIZE]
    )
    return SplitCandidate(
        name=name,
        paragraph_count=len(result),
        average_length=average,
        sample=sample,
    )


def _round_half_up(value: float) -> int:
    return int(value + 0.5)
