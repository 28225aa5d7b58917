# lexsearch/application/layout_renderer.py

from dataclasses import dataclass
from typing import List, Optional

from lexsearch.domain.errors import RenderingPreconditionError
from lexsearch.domain.interfaces import TextMeasurePort
from lexsearch.domain.markup_tokenizer import InlineTokenizer
from lexsearch.domain.models import (
    BlockRole,
    FormattedBlock,
    FormattedDocumentModel,
    InlineRun,
    LayoutLine,
    LayoutPage,
    MatchResult,
    PaginatedLayout,
    PlacedRun,
    RunKind,
    SearchSession,
)


SUMMARY_HEADING = "Search Summary"
NO_MATCHES_NOTE = "No paragraphs found with the search term."


def results_title(term: str) -> str:
    return f'Search Results for "{term}"'


def _require_query(session: SearchSession) -> str:
    if session.query is None:
        raise ValueError("Session has no query; run a search before rendering.")
    return session.query.term


# ── Structural rendering ──────────────────────────────────────────────────────

class StructuralRenderer:
    """
    Maps a finished search session onto a flow of styled blocks for the
    structured-document sink: title, summary, then one group per document.
    Groups are separated by page breaks; the last one is not followed by one.
    """

    def __init__(self, tokenizer: Optional[InlineTokenizer] = None):
        self._tokenizer = tokenizer or InlineTokenizer()

    def render(self, session: SearchSession) -> FormattedDocumentModel:
        term = _require_query(session)
        statistics = session.statistics
        title = results_title(term)

        blocks: List[FormattedBlock] = [
            FormattedBlock(BlockRole.TITLE, (InlineRun.plain(title),), space_after=20),
            FormattedBlock(
                BlockRole.HEADING,
                (InlineRun.plain(SUMMARY_HEADING),),
                space_before=20,
                space_after=10,
            ),
            _stat_block("Files searched: ", statistics.document_count, space_after=5),
            _stat_block("Total paragraphs found: ", statistics.total_found_paragraphs, space_after=5),
            _stat_block("Total occurrences: ", statistics.total_occurrences, space_after=20),
        ]

        for position, result in enumerate(session.results):
            blocks.extend(self._render_result(result))
            if position < len(session.results) - 1:
                blocks.append(FormattedBlock(BlockRole.PAGE_BREAK))

        return FormattedDocumentModel(title=title, blocks=tuple(blocks), statistics=statistics)

    def _render_result(self, result: MatchResult) -> List[FormattedBlock]:
        blocks = [
            FormattedBlock(
                BlockRole.HEADING,
                (InlineRun.plain(f"Source: {result.document_identifier}"),),
                space_before=30,
                space_after=10,
            ),
            FormattedBlock(
                BlockRole.BODY,
                (
                    InlineRun.strong("Found paragraphs: "),
                    InlineRun.plain(str(len(result.found_paragraphs))),
                    InlineRun.plain(f" of {result.total_paragraph_count} total paragraphs"),
                ),
                space_after=15,
            ),
        ]

        if not result.found_paragraphs:
            blocks.append(
                FormattedBlock(BlockRole.NOTE, (InlineRun.emphasis(NO_MATCHES_NOTE),), space_after=15)
            )
            return blocks

        for ordinal, paragraph in enumerate(result.found_paragraphs, start=1):
            runs = self._tokenizer.tokenize(paragraph.strip())
            blocks.append(
                FormattedBlock(BlockRole.BODY, tuple(runs), label=f"{ordinal}. ", space_after=10)
            )
        return blocks


def _stat_block(label: str, value: int, space_after: int) -> FormattedBlock:
    return FormattedBlock(
        BlockRole.BODY,
        (InlineRun.strong(label), InlineRun.plain(str(value))),
        space_after=space_after,
    )


# ── Paginated rendering ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class PageLayoutConfig:
    """
    Page geometry for the paginated rendering, in millimetres (A4 by default).
    Font sizes are in points; line height is font_size * line_height_factor.
    """
    page_width: float = 210.0
    page_height: float = 297.0
    margin: float = 20.0
    top: float = 30.0
    bottom_margin: float = 20.0
    line_height_factor: float = 0.6
    block_spacing: float = 5.0
    heading_spacing: float = 5.0
    title_spacing: float = 30.0
    summary_spacing: float = 10.0
    document_spacing: float = 15.0
    document_reserve: float = 60.0
    paragraph_reserve: float = 40.0
    title_font_size: float = 18.0
    heading_font_size: float = 14.0
    stat_font_size: float = 11.0
    body_font_size: float = 10.0
    label_indent: float = 10.0
    body_indent: float = 20.0

    def __post_init__(self) -> None:
        deepest_indent = max(self.label_indent, self.body_indent)
        if self.page_width - 2 * self.margin - deepest_indent <= 0:
            raise RenderingPreconditionError(
                f"No usable line width: page width {self.page_width} with margins "
                f"{self.margin} and indent {deepest_indent}."
            )
        if self.page_bottom <= self.top:
            raise RenderingPreconditionError(
                f"No usable page height: top {self.top} is below the bottom limit {self.page_bottom}."
            )
        if self.line_height_factor <= 0:
            raise RenderingPreconditionError("Line height factor must be positive.")

    @property
    def usable_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def page_bottom(self) -> float:
        return self.page_height - self.bottom_margin


class _PageBuilder:
    """Vertical cursor plus the pages filled so far."""

    def __init__(self, config: PageLayoutConfig):
        self._config = config
        self._pages: List[LayoutPage] = []
        self._lines: List[LayoutLine] = []
        self.y = config.top

    def new_page(self) -> None:
        self._pages.append(LayoutPage(lines=tuple(self._lines)))
        self._lines = []
        self.y = self._config.top

    def reserve(self, height: float) -> None:
        """Start a new page unless `height` units remain below the cursor."""
        if self.y > self._config.page_height - height:
            self.new_page()

    def place(self, placements: List[PlacedRun], advance: float) -> None:
        if self.y > self._config.page_bottom:
            self.new_page()
        self._lines.append(LayoutLine(y=self.y, placements=tuple(placements)))
        self.y += advance

    def finish(self) -> List[LayoutPage]:
        return self._pages + [LayoutPage(lines=tuple(self._lines))]


class _LineFiller:
    """
    Greedy word packing for one block of runs. A word goes on the current
    line unless it would push the line past `max_width`, in which case the
    line is flushed first. Words are never split.
    """

    def __init__(
        self,
        builder: _PageBuilder,
        measure: TextMeasurePort,
        origin_x: float,
        max_width: float,
        font_size: float,
        line_height: float,
    ):
        self._builder = builder
        self._measure = measure
        self._origin_x = origin_x
        self._max_width = max_width
        self._font_size = font_size
        self._line_height = line_height
        self._line: List[PlacedRun] = []
        self._width = 0.0
        self._pending_space = False

    def add(self, text: str, kind: RunKind) -> None:
        words = text.split()
        if not words:
            self._pending_space = self._pending_space or bool(text)
            return

        leading_space = text[0].isspace() or self._pending_space
        for position, word in enumerate(words):
            spaced = bool(self._line) and (position > 0 or leading_space)
            piece = f" {word}" if spaced else word
            piece_width = self._measure.measure(piece, kind, self._font_size)

            if self._line and self._width + piece_width > self._max_width:
                self.flush()
                piece = word
                piece_width = self._measure.measure(word, kind, self._font_size)

            self._line.append(PlacedRun(piece, self._origin_x + self._width, kind, self._font_size))
            self._width += piece_width

        self._pending_space = text[-1].isspace()

    def flush(self) -> None:
        if not self._line:
            return
        self._builder.place(self._line, self._line_height)
        self._line = []
        self._width = 0.0
        self._pending_space = False


class PaginatedRenderer:
    """
    Lays a finished search session out on fixed-size pages with greedy,
    style-aware word wrapping. Width of every word comes from a
    TextMeasurePort so bold, italic and monospace text wrap correctly.
    """

    def __init__(
        self,
        measure: TextMeasurePort,
        config: Optional[PageLayoutConfig] = None,
        tokenizer: Optional[InlineTokenizer] = None,
    ):
        self._measure = measure
        self._config = config or PageLayoutConfig()
        self._tokenizer = tokenizer or InlineTokenizer()

    @property
    def config(self) -> PageLayoutConfig:
        return self._config

    def render(self, session: SearchSession) -> PaginatedLayout:
        config = self._config
        term = _require_query(session)
        statistics = session.statistics
        builder = _PageBuilder(config)

        self._place_title(builder, results_title(term))

        self._write_block(builder, [InlineRun.strong(SUMMARY_HEADING)], config.heading_font_size)
        for line in (
            f"Files searched: {statistics.document_count}",
            f"Total paragraphs found: {statistics.total_found_paragraphs}",
            f"Total occurrences: {statistics.total_occurrences}",
        ):
            self._write_block(builder, [InlineRun.plain(line)], config.stat_font_size)
        builder.y += config.summary_spacing

        for result in session.results:
            self._render_result(builder, result)

        return PaginatedLayout(
            pages=tuple(builder.finish()),
            statistics=statistics,
            page_width=config.page_width,
            page_height=config.page_height,
        )

    def _render_result(self, builder: _PageBuilder, result: MatchResult) -> None:
        config = self._config
        builder.reserve(config.document_reserve)

        self._write_block(
            builder,
            [InlineRun.strong(f"Source: {result.document_identifier}")],
            config.heading_font_size,
        )
        self._write_block(
            builder,
            [InlineRun.plain(
                f"Found paragraphs: {len(result.found_paragraphs)} "
                f"of {result.total_paragraph_count} total"
            )],
            config.stat_font_size,
        )
        builder.y += config.block_spacing

        if not result.found_paragraphs:
            self._write_block(
                builder,
                [InlineRun.plain(NO_MATCHES_NOTE)],
                config.stat_font_size,
                indent=config.label_indent,
            )
        else:
            for ordinal, paragraph in enumerate(result.found_paragraphs, start=1):
                builder.reserve(config.paragraph_reserve)
                self._place_label(builder, f"{ordinal}. ")
                self._write_block(
                    builder,
                    self._tokenizer.tokenize(paragraph.strip()),
                    config.body_font_size,
                    indent=config.body_indent,
                )

        builder.y += config.document_spacing

    def _place_title(self, builder: _PageBuilder, title: str) -> None:
        config = self._config
        width = self._measure.measure(title, RunKind.STRONG, config.title_font_size)
        x = max(config.margin, (config.page_width - width) / 2)
        builder.place(
            [PlacedRun(title, x, RunKind.STRONG, config.title_font_size)],
            advance=config.title_spacing,
        )

    def _place_label(self, builder: _PageBuilder, label: str) -> None:
        # Shares its baseline with the first line of the paragraph body.
        config = self._config
        builder.place(
            [PlacedRun(label, config.margin + config.label_indent, RunKind.STRONG, config.body_font_size)],
            advance=0.0,
        )

    def _write_block(
        self,
        builder: _PageBuilder,
        runs: List[InlineRun],
        font_size: float,
        indent: float = 0.0,
    ) -> None:
        config = self._config
        filler = _LineFiller(
            builder,
            self._measure,
            origin_x=config.margin + indent,
            max_width=config.usable_width - indent,
            font_size=font_size,
            line_height=font_size * config.line_height_factor,
        )

        for run in runs:
            if run.kind is RunKind.HEADING:
                filler.flush()
                filler.add(run.content, run.kind)
                filler.flush()
                builder.y += config.heading_spacing
            else:
                filler.add(run.content, run.kind)

        filler.flush()
        builder.y += config.block_spacing
