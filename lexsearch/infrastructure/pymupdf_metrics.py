# lexsearch/infrastructure/pymupdf_metrics.py
# Base-14 font metrics from PyMuPDF. The PDF exporter draws with the same fonts.

import fitz

from lexsearch.domain.interfaces import TextMeasurePort
from lexsearch.domain.models import RunKind


POINTS_PER_MM = 72 / 25.4

# PyMuPDF short names for the built-in Helvetica / Courier faces.
FONT_BY_KIND = {
    RunKind.PLAIN: "helv",
    RunKind.STRONG: "hebo",
    RunKind.HEADING: "hebo",
    RunKind.EMPHASIS: "heit",
    RunKind.CODE: "cour",
}


def font_for(kind: RunKind) -> str:
    return FONT_BY_KIND[kind]


class PyMuPDFTextMeasure(TextMeasurePort):
    """
    Measures text with PyMuPDF's built-in font metrics.
    Widths come back in points divided by `points_per_unit`, so the default
    reports millimetres to match PageLayoutConfig.
    """

    def __init__(self, points_per_unit: float = POINTS_PER_MM):
        if points_per_unit <= 0:
            raise ValueError("points_per_unit must be positive.")
        self._points_per_unit = points_per_unit

    def measure(self, text: str, kind: RunKind, font_size: float) -> float:
        points = fitz.get_text_length(text, fontname=font_for(kind), fontsize=font_size)
        return points / self._points_per_unit
