# main.py

import sys
from pathlib import Path

from lexsearch.application.layout_renderer import PaginatedRenderer, StructuralRenderer
from lexsearch.application.search_service import LexicalSearchService
from lexsearch.domain.models import SearchSession
from lexsearch.infrastructure.document_loader import DocumentLoader
from lexsearch.infrastructure.docx_exporter import DocxExporter
from lexsearch.infrastructure.export_naming import build_export_filename
from lexsearch.infrastructure.pdf_exporter import PdfExporter
from lexsearch.infrastructure.pymupdf_metrics import PyMuPDFTextMeasure
from lexsearch.interface.cli import (
    ask_continue,
    ask_export_format,
    ask_show_debug,
    display_debug,
    display_error,
    display_export,
    display_loaded_documents,
    display_results,
    display_welcome_banner,
    prompt_for_query,
)


DATA_DIRECTORY = "data"
EXPORT_DIRECTORY = "exports"


def main() -> None:
    display_welcome_banner()

    # ── 1. Load documents ─────────────────────────────────────────────────────
    loader = DocumentLoader()
    try:
        documents = loader.load_directory(DATA_DIRECTORY)
    except FileNotFoundError as error:
        display_error(str(error))
        sys.exit(1)

    if not documents:
        display_error(f"No supported documents found in '{DATA_DIRECTORY}/'.")
        sys.exit(1)

    display_loaded_documents(documents)

    search_service = LexicalSearchService()
    session = SearchSession().with_documents(documents)

    # ── 2. Interactive search loop ────────────────────────────────────────────
    while True:
        term = prompt_for_query()
        try:
            session = search_service.search(session, term)
        except ValueError as error:
            display_error(str(error))
        else:
            display_results(session)
            if ask_show_debug():
                display_debug(session)
            try:
                _export(session, ask_export_format())
            except OSError as error:
                display_error(f"Export failed: {error}")

        if not ask_continue():
            break


def _export(session: SearchSession, choice: str) -> None:
    """Render the session and write the requested artifacts."""
    if choice == "none":
        return

    export_dir = Path(EXPORT_DIRECTORY)
    if choice in ("docx", "both"):
        model = StructuralRenderer().render(session)
        path = DocxExporter().export(model, export_dir / build_export_filename("docx"))
        display_export(path)

    if choice in ("pdf", "both"):
        layout = PaginatedRenderer(PyMuPDFTextMeasure()).render(session)
        path = PdfExporter().export(layout, export_dir / build_export_filename("pdf"))
        display_export(path)


if __name__ == "__main__":
    main()
