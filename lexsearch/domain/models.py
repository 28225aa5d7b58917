# lexsearch/domain/models.py

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .errors import InvalidQueryError


@dataclass(frozen=True)
class Document:
    """
    Raw text content of one source file, keyed by its identifier (file name).
    Owned by the caller; the pipeline only reads it.
    """
    identifier: str
    raw_text: str


@dataclass(frozen=True)
class Paragraph:
    """A searchable unit of text. `index` is the 1-based position in the source."""
    index: int
    text: str


@dataclass(frozen=True)
class SearchQuery:
    """
    A validated search term. Build it with `SearchQuery.parse()` so the
    term is normalized exactly once per search run.
    """
    term: str
    normalized: str

    @classmethod
    def parse(cls, raw_term: str) -> "SearchQuery":
        normalized = normalize_term(raw_term or "")
        if not normalized:
            raise InvalidQueryError("Search term cannot be empty.")
        return cls(term=raw_term.strip(), normalized=normalized)


def normalize_term(term: str) -> str:
    return term.strip().lower()


@dataclass(frozen=True)
class MatchResult:
    """
    Per-document outcome of one search.
    occurrence_count is counted on the original paragraphs, before restructuring.
    """
    document_identifier: str
    found_paragraphs: Tuple[str, ...]
    total_paragraph_count: int
    occurrence_count: int


@dataclass(frozen=True)
class SearchStatistics:
    document_count: int
    total_found_paragraphs: int
    total_occurrences: int

    @classmethod
    def from_results(cls, results: "Tuple[MatchResult, ...]") -> "SearchStatistics":
        return cls(
            document_count=len(results),
            total_found_paragraphs=sum(len(r.found_paragraphs) for r in results),
            total_occurrences=sum(r.occurrence_count for r in results),
        )


# ── Inline markup ─────────────────────────────────────────────────────────────

class RunKind(str, Enum):
    PLAIN = "plain"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    CODE = "code"
    HEADING = "heading"


@dataclass(frozen=True)
class InlineRun:
    """A contiguous span of text sharing one inline style."""
    kind: RunKind
    content: str
    level: Optional[int] = None  # 1..6, headings only

    def __post_init__(self) -> None:
        if self.kind is RunKind.HEADING:
            if self.level is None or not 1 <= self.level <= 6:
                raise ValueError(f"Heading level must be 1-6, got {self.level!r}")
        elif self.level is not None:
            raise ValueError(f"Only heading runs carry a level, got {self.kind.value}")

    @classmethod
    def plain(cls, content: str) -> "InlineRun":
        return cls(RunKind.PLAIN, content)

    @classmethod
    def strong(cls, content: str) -> "InlineRun":
        return cls(RunKind.STRONG, content)

    @classmethod
    def emphasis(cls, content: str) -> "InlineRun":
        return cls(RunKind.EMPHASIS, content)

    @classmethod
    def code(cls, content: str) -> "InlineRun":
        return cls(RunKind.CODE, content)

    @classmethod
    def heading(cls, content: str, level: int) -> "InlineRun":
        return cls(RunKind.HEADING, content, level)


# ── Structured-document model ─────────────────────────────────────────────────

class BlockRole(str, Enum):
    TITLE = "title"
    HEADING = "heading"
    BODY = "body"
    NOTE = "note"
    PAGE_BREAK = "page_break"


@dataclass(frozen=True)
class FormattedBlock:
    role: BlockRole
    runs: Tuple[InlineRun, ...] = ()
    label: Optional[str] = None
    space_before: int = 0  # points
    space_after: int = 0   # points


@dataclass(frozen=True)
class FormattedDocumentModel:
    title: str
    blocks: Tuple[FormattedBlock, ...]
    statistics: SearchStatistics


# ── Paginated model ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlacedRun:
    text: str
    x: float
    kind: RunKind
    font_size: float


@dataclass(frozen=True)
class LayoutLine:
    y: float
    placements: Tuple[PlacedRun, ...]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.placements)


@dataclass(frozen=True)
class LayoutPage:
    lines: Tuple[LayoutLine, ...]


@dataclass(frozen=True)
class PaginatedLayout:
    pages: Tuple[LayoutPage, ...]
    statistics: SearchStatistics
    page_width: float
    page_height: float


# ── Diagnostics ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SplitCandidate:
    name: str
    paragraph_count: int
    average_length: int
    sample: Tuple[str, ...]


@dataclass(frozen=True)
class SegmentationDiagnostics:
    chosen_method: str
    original_length: int
    normalized_length: int
    has_carriage_returns: bool
    has_windows_line_endings: bool
    double_newline_count: int
    single_newline_count: int
    candidates: Tuple[SplitCandidate, ...]

    @property
    def line_endings_converted(self) -> bool:
        return self.has_carriage_returns


class SectionDecision(str, Enum):
    BASE = "BASE"
    MATCH = "MATCH"
    SKIP = "SKIP"


@dataclass(frozen=True)
class RestructureTrace:
    document_identifier: str
    paragraph_index: int
    original_paragraph: str
    normalized_term: str
    contains_pipe: bool
    split_count: int
    sections: Tuple[Tuple[str, SectionDecision], ...]
    final_paragraph: str

    @property
    def triggered(self) -> bool:
        return bool(self.sections)


@dataclass(frozen=True)
class SkippedDocument:
    identifier: str
    reason: str


# ── Session ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SearchSession:
    """
    Everything one search run needs and produces. The pipeline never mutates
    a session; it returns a new one with the results filled in.
    """
    documents: Tuple[Document, ...] = ()
    query: Optional[SearchQuery] = None
    results: Tuple[MatchResult, ...] = ()
    segmentation: Tuple[Tuple[str, SegmentationDiagnostics], ...] = ()
    traces: Tuple[RestructureTrace, ...] = ()
    skipped: Tuple[SkippedDocument, ...] = ()

    @property
    def statistics(self) -> SearchStatistics:
        return SearchStatistics.from_results(self.results)

    def get_document(self, identifier: str) -> Optional[Document]:
        for document in self.documents:
            if document.identifier == identifier:
                return document
        return None

    def document_identifiers(self) -> List[str]:
        return [d.identifier for d in self.documents]

    def with_documents(self, documents: "List[Document]") -> "SearchSession":
        """
        Add or replace documents by identifier, keeping first-seen order.
        Previous results are dropped because they no longer describe the set.
        """
        merged = {d.identifier: d for d in self.documents}
        for document in documents:
            merged[document.identifier] = document
        return SearchSession(documents=tuple(merged.values()))
