# lexsearch/infrastructure/document_loader.py

import io
from pathlib import Path
from typing import List, Optional

import fitz
import pdfplumber

from lexsearch.domain.models import Document


SUPPORTED_SUFFIXES = {".txt", ".md", ".pdf"}
MAX_FILE_BYTES = 10 * 1024 * 1024

# PDF pages are joined with a blank line so a page boundary is a paragraph boundary.
PAGE_SEPARATOR = "\n\n"


class UnsupportedDocumentError(ValueError):
    """Raised when a file is the wrong type or too large to be searched."""


class DocumentLoader:
    """
    Reads source files into Documents keyed by file name.

    - .txt / .md are decoded as UTF-8 (BOM stripped, bad bytes replaced)
    - .pdf text is extracted page by page with pdfplumber, PyMuPDF as fallback
    - files over `max_file_bytes` are rejected, never truncated
    """

    def __init__(self, max_file_bytes: int = MAX_FILE_BYTES):
        self._max_file_bytes = max_file_bytes

    def load_directory(self, directory_path: str) -> List[Document]:
        data_dir = Path(directory_path)
        if not data_dir.exists():
            raise FileNotFoundError(f"Data directory not found: {directory_path}")

        documents: List[Document] = []
        for file_path in sorted(data_dir.rglob("*")):
            if not file_path.is_file() or not self.is_supported(file_path.name):
                continue
            try:
                document = self.load_file(file_path)
            except (OSError, UnsupportedDocumentError) as error:
                print(f"[DocumentLoader] ⚠ Skipping {file_path.name}: {error}")
                continue
            if document is not None:
                documents.append(document)
                print(f"[DocumentLoader] Loaded {file_path.name} ({len(document.raw_text)} chars)")

        print(f"[DocumentLoader] Total documents loaded: {len(documents)}")
        return documents

    def load_file(self, file_path: Path) -> Optional[Document]:
        """
        Load a single file. Returns None for unsupported file types.
        """
        file_path = Path(file_path)
        if not self.is_supported(file_path.name):
            return None
        return self.load_bytes(file_path.name, file_path.read_bytes())

    def load_bytes(self, name: str, data: bytes) -> Document:
        """Build a Document from uploaded bytes. Raises UnsupportedDocumentError."""
        if not self.is_supported(name):
            raise UnsupportedDocumentError(
                f"{name}: Unsupported file type. Please upload text, markdown or PDF files."
            )
        if len(data) > self._max_file_bytes:
            limit_mb = self._max_file_bytes // (1024 * 1024)
            raise UnsupportedDocumentError(f"{name}: File too large. Maximum size is {limit_mb}MB.")

        if Path(name).suffix.lower() == ".pdf":
            text = self._extract_pdf_text(name, data)
        else:
            text = self._decode_text(data)
        return Document(identifier=name, raw_text=text)

    @staticmethod
    def is_supported(name: str) -> bool:
        return Path(name).suffix.lower() in SUPPORTED_SUFFIXES

    # ─── Private: Decoding ────────────────────────────────────────────────────

    @staticmethod
    def _decode_text(data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")

    def _extract_pdf_text(self, name: str, data: bytes) -> str:
        # Try pdfplumber first
        pages = self._extract_pages_pdfplumber(name, data)

        # Fallback to PyMuPDF
        if not pages:
            pages = self._extract_pages_pymupdf(name, data)

        return PAGE_SEPARATOR.join(pages)

    @staticmethod
    def _extract_pages_pdfplumber(name: str, data: bytes) -> List[str]:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = [page.extract_text(x_tolerance=2, y_tolerance=2) for page in pdf.pages]
        except Exception as error:
            print(f"[DocumentLoader] pdfplumber error on {name}: {error}")
            return []
        return [text for text in pages if text and text.strip()]

    @staticmethod
    def _extract_pages_pymupdf(name: str, data: bytes) -> List[str]:
        try:
            with fitz.open(stream=data, filetype="pdf") as pdf:
                pages = [page.get_text() for page in pdf]
        except Exception as error:
            print(f"[DocumentLoader] PyMuPDF error on {name}: {error}")
            return []
        return [text for text in pages if text and text.strip()]
