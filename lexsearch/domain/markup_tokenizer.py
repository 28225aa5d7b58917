# lexsearch/domain/markup_tokenizer.py

from typing import List, Optional, Tuple

from .models import InlineRun, RunKind


DEFAULT_EMPHASIS_MARKERS = "*"
CODE_MARKER = "`"
HEADING_MARKER = "#"
MAX_HEADING_LEVEL = 6

_Token = Optional[Tuple[InlineRun, int]]


class InlineTokenizer:
    """
    Single left-to-right scan turning a text fragment into typed runs.

    At each position the constructs are tried in priority order:
    heading, strong, emphasis, code. Anything else is plain text up to the
    next position where one of them could start. Unterminated markers are
    kept as plain text. Nothing carries over between calls.
    """

    def __init__(self, emphasis_markers: str = DEFAULT_EMPHASIS_MARKERS):
        if not emphasis_markers:
            raise ValueError("At least one emphasis marker is required.")
        if CODE_MARKER in emphasis_markers or HEADING_MARKER in emphasis_markers:
            raise ValueError("Emphasis markers cannot overlap code or heading markers.")
        self._emphasis_markers = emphasis_markers

    def tokenize(self, fragment: str) -> List[InlineRun]:
        runs: List[InlineRun] = []
        position = 0

        while position < len(fragment):
            token = (
                self._read_heading(fragment, position)
                or self._read_strong(fragment, position)
                or self._read_emphasis(fragment, position)
                or self._read_code(fragment, position)
            )
            if token is not None:
                run, position = token
                runs.append(run)
                continue

            end = self._next_marker(fragment, position + 1)
            _append_plain(runs, fragment[position:end])
            position = end

        return runs

    # ─── Private: Constructs ─────────────────────────────────────────────────

    def _read_heading(self, text: str, position: int) -> _Token:
        if text[position] != HEADING_MARKER:
            return None
        if position > 0 and text[position - 1] != "\n":
            return None

        cursor = position
        while cursor < len(text) and text[cursor] == HEADING_MARKER:
            cursor += 1
        level = cursor - position
        if level > MAX_HEADING_LEVEL:
            return None

        content_start = cursor
        while content_start < len(text) and text[content_start] in " \t":
            content_start += 1
        if content_start == cursor:
            return None

        line_end = text.find("\n", content_start)
        if line_end == -1:
            line_end = len(text)
        content = text[content_start:line_end]
        if not content:
            return None

        # The line break stays in the stream so a following heading can match.
        return InlineRun.heading(content, level), line_end

    def _read_strong(self, text: str, position: int) -> _Token:
        marker = text[position]
        if marker not in self._emphasis_markers:
            return None
        opening = marker * 2
        if not text.startswith(opening, position):
            return None

        content_start = position + 2
        closing = text.find(opening, content_start)
        if closing <= content_start:
            return None
        return InlineRun.strong(text[content_start:closing]), closing + 2

    def _read_emphasis(self, text: str, position: int) -> _Token:
        marker = text[position]
        if marker not in self._emphasis_markers:
            return None
        if text[position + 1:position + 2] == marker:
            return None
        if position > 0 and text[position - 1] == marker:
            return None

        content_start = position + 1
        closing = text.find(marker, content_start)
        if closing <= content_start:
            return None
        # A doubled closing marker belongs to a strong run, not to us.
        if text[closing + 1:closing + 2] == marker:
            return None
        return InlineRun.emphasis(text[content_start:closing]), closing + 1

    def _read_code(self, text: str, position: int) -> _Token:
        if text[position] != CODE_MARKER:
            return None
        content_start = position + 1
        closing = text.find(CODE_MARKER, content_start)
        if closing <= content_start:
            return None
        return InlineRun.code(text[content_start:closing]), closing + 1

    def _next_marker(self, text: str, start: int) -> int:
        for index in range(start, len(text)):
            char = text[index]
            if char in self._emphasis_markers or char == CODE_MARKER:
                return index
            if char == HEADING_MARKER and text[index - 1] == "\n":
                return index
        return len(text)


def _append_plain(runs: List[InlineRun], content: str) -> None:
    if not content:
        return
    if runs and runs[-1].kind is RunKind.PLAIN:
        runs[-1] = InlineRun.plain(runs[-1].content + content)
    else:
        runs.append(InlineRun.plain(content))


_default_tokenizer = InlineTokenizer()


def tokenize(fragment: str) -> List[InlineRun]:
    return _default_tokenizer.tokenize(fragment)


def visible_text(runs: List[InlineRun]) -> str:
    """Concatenate run contents, i.e. the fragment without its markers."""
    return "".join(run.content for run in runs)
