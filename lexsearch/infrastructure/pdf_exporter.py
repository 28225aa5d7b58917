# lexsearch/infrastructure/pdf_exporter.py

from pathlib import Path
from typing import List

import fitz

from lexsearch.domain.interfaces import ExportSinkPort
from lexsearch.domain.models import PaginatedLayout
from lexsearch.infrastructure.pymupdf_metrics import POINTS_PER_MM, font_for


LATIN_1_MAX = 0xFF


class PdfExporter(ExportSinkPort):
    """
    Page-based sink: draws a PaginatedLayout with PyMuPDF.
    Every placement is written at its baseline; nothing is re-wrapped here.

    The base-14 fonts only cover Latin-1. Other characters (Greek, Cyrillic,
    CJK) are drawn as placeholders, and a warning names them.
    """

    extension = "pdf"

    def __init__(self, points_per_unit: float = POINTS_PER_MM):
        self._scale = points_per_unit

    def to_bytes(self, rendered: PaginatedLayout) -> bytes:
        if not isinstance(rendered, PaginatedLayout):
            raise TypeError(f"PdfExporter expects a PaginatedLayout, got {type(rendered).__name__}")

        undrawable = undrawable_characters(rendered)
        if undrawable:
            print(
                f"[PdfExporter] ⚠ Base-14 fonts cannot draw {len(undrawable)} character(s), "
                f"written as placeholders: {''.join(undrawable[:20])}"
            )

        with fitz.open() as pdf:
            for page_layout in rendered.pages:
                page = pdf.new_page(
                    width=rendered.page_width * self._scale,
                    height=rendered.page_height * self._scale,
                )
                for line in page_layout.lines:
                    for placement in line.placements:
                        page.insert_text(
                            fitz.Point(placement.x * self._scale, line.y * self._scale),
                            placement.text,
                            fontname=font_for(placement.kind),
                            fontsize=placement.font_size,
                        )
            return pdf.tobytes()

    def export(self, rendered: PaginatedLayout, destination: Path) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.to_bytes(rendered))
        print(f"[PdfExporter] Wrote {len(rendered.pages)} page(s) to {destination}")
        return destination


def undrawable_characters(layout: PaginatedLayout) -> List[str]:
    """Distinct characters outside Latin-1, in order of first appearance."""
    seen: List[str] = []
    for page in layout.pages:
        for line in page.lines:
            for placement in line.placements:
                for char in placement.text:
                    if ord(char) > LATIN_1_MAX and char not in seen:
                        seen.append(char)
    return seen
