# lexsearch/infrastructure/docx_exporter.py

import io
from pathlib import Path

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt

from lexsearch.domain.interfaces import ExportSinkPort
from lexsearch.domain.markup_tokenizer import visible_text
from lexsearch.domain.models import BlockRole, FormattedBlock, FormattedDocumentModel, InlineRun, RunKind


CODE_FONT = "Courier New"
CODE_SHADING = "F5F5F5"


def heading_run_size(level: int) -> Pt:
    """Heading runs shrink one point per level: 13pt at level 1, 8pt at level 6."""
    return Pt((28 - 2 * level) / 2)


class DocxExporter(ExportSinkPort):
    """
    Structured-document sink: writes a FormattedDocumentModel as a .docx
    with python-docx. Inline runs keep their style (bold, italic, shaded
    monospace, sized headings).
    """

    extension = "docx"

    def to_bytes(self, rendered: FormattedDocumentModel) -> bytes:
        if not isinstance(rendered, FormattedDocumentModel):
            raise TypeError(
                f"DocxExporter expects a FormattedDocumentModel, got {type(rendered).__name__}"
            )
        document = DocxDocument()
        for block in rendered.blocks:
            self._add_block(document, block)

        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    def export(self, rendered: FormattedDocumentModel, destination: Path) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.to_bytes(rendered))
        print(f"[DocxExporter] Wrote {len(rendered.blocks)} block(s) to {destination}")
        return destination

    # ─── Private: Blocks ─────────────────────────────────────────────────────

    def _add_block(self, document, block: FormattedBlock) -> None:
        if block.role is BlockRole.PAGE_BREAK:
            paragraph = document.add_paragraph()
            paragraph.paragraph_format.page_break_before = True
            return

        if block.role is BlockRole.TITLE:
            paragraph = document.add_heading(visible_text(block.runs), level=0)
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        elif block.role is BlockRole.HEADING:
            paragraph = document.add_heading(visible_text(block.runs), level=1)
        else:
            paragraph = document.add_paragraph()
            if block.label:
                paragraph.add_run(block.label).bold = True
            for run in block.runs:
                self._add_run(paragraph, run)

        if block.space_before:
            paragraph.paragraph_format.space_before = Pt(block.space_before)
        if block.space_after:
            paragraph.paragraph_format.space_after = Pt(block.space_after)

    @staticmethod
    def _add_run(paragraph, run: InlineRun) -> None:
        text_run = paragraph.add_run(run.content)
        if run.kind is RunKind.STRONG:
            text_run.bold = True
        elif run.kind is RunKind.EMPHASIS:
            text_run.italic = True
        elif run.kind is RunKind.CODE:
            text_run.font.name = CODE_FONT
            _shade(text_run, CODE_SHADING)
        elif run.kind is RunKind.HEADING:
            text_run.bold = True
            text_run.font.size = heading_run_size(run.level)


def _shade(text_run, fill: str) -> None:
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    text_run._element.get_or_add_rPr().append(shading)
