from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from lexsearch.application.layout_renderer import PaginatedRenderer, StructuralRenderer
from lexsearch.application.search_service import LexicalSearchService
from lexsearch.domain.errors import InvalidQueryError
from lexsearch.domain.models import SearchSession
from lexsearch.infrastructure.document_loader import DocumentLoader, UnsupportedDocumentError
from lexsearch.infrastructure.docx_exporter import DocxExporter
from lexsearch.infrastructure.export_naming import build_export_filename
from lexsearch.infrastructure.pdf_exporter import PdfExporter
from lexsearch.infrastructure.pymupdf_metrics import PyMuPDFTextMeasure

# ── Configuration ────────────────────────────────────────────────────────────
DATA_DIRECTORY = "data"

EXPORT_MEDIA_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "pdf": "application/pdf",
}

# ── API Models ───────────────────────────────────────────────────────────────
class SearchRequest(BaseModel):
    term: str
    documents: Optional[List[str]] = None  # None = every document in the data folder

class ResultSchema(BaseModel):
    document: str
    found_paragraphs: List[str]
    total_paragraphs: int
    occurrence_count: int

class StatisticsSchema(BaseModel):
    document_count: int
    total_found_paragraphs: int
    total_occurrences: int

class SkippedSchema(BaseModel):
    identifier: str
    reason: str

class SearchResponse(BaseModel):
    term: str
    statistics: StatisticsSchema
    results: List[ResultSchema]
    skipped: List[SkippedSchema]

# ── App Initialization ───────────────────────────────────────────────────────
app = FastAPI(
    title="Lexical Search API",
    description="Paragraph-level term search over text, markdown and PDF documents.",
    version="1.0.0"
)

# ── CORS Middleware ──────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8080", "http://127.0.0.1:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

search_service = LexicalSearchService()
loader = DocumentLoader()


def _load_session() -> SearchSession:
    """Read the data folder fresh for every request; nothing is cached between searches."""
    try:
        documents = loader.load_directory(DATA_DIRECTORY)
    except FileNotFoundError:
        documents = []
    return SearchSession().with_documents(documents)


def _run_search(request: SearchRequest) -> SearchSession:
    try:
        return search_service.search(_load_session(), request.term, request.documents)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ── Endpoints ────────────────────────────────────────────────────────────────
@app.get("/")
def read_root():
    return {
        "message": "Lexical Search API is running.",
        "documents": len(_load_session().documents),
    }

@app.get("/documents")
def get_documents():
    """Returns the searchable documents and their sizes in characters."""
    session = _load_session()
    return {
        "documents": [
            {"filename": d.identifier, "characters": len(d.raw_text)}
            for d in session.documents
        ]
    }

@app.post("/upload")
async def upload_files(files: List[UploadFile] = File(...)):
    """Upload TXT/MD/PDF files into the data folder. Invalid files are reported, not stored."""
    data_dir = Path(DATA_DIRECTORY)
    data_dir.mkdir(parents=True, exist_ok=True)

    saved_files = []
    rejected = []
    for file in files:
        filename = Path(file.filename or "").name
        data = await file.read()
        try:
            loader.load_bytes(filename, data)
        except UnsupportedDocumentError as e:
            rejected.append({"filename": filename, "reason": str(e)})
            continue

        (data_dir / filename).write_bytes(data)
        saved_files.append(filename)
        print(f"[API] Stored upload: {filename}")

    return {
        "message": f"Successfully uploaded {len(saved_files)} files.",
        "files": saved_files,
        "rejected": rejected,
    }

@app.delete("/documents/{filename}")
def delete_document(filename: str):
    """Delete a document from the data folder."""
    file_path = Path(DATA_DIRECTORY) / Path(filename).name

    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    try:
        file_path.unlink()
        print(f"[API] Deleted file: {file_path}")
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete file: {str(e)}")

    return {"message": f"Successfully deleted document '{filename}'"}

@app.post("/search", response_model=SearchResponse)
def search(request: SearchRequest):
    session = _run_search(request)
    statistics = session.statistics

    return SearchResponse(
        term=session.query.term,
        statistics=StatisticsSchema(**asdict(statistics)),
        results=[
            ResultSchema(
                document=r.document_identifier,
                found_paragraphs=list(r.found_paragraphs),
                total_paragraphs=r.total_paragraph_count,
                occurrence_count=r.occurrence_count,
            )
            for r in session.results
        ],
        skipped=[SkippedSchema(identifier=s.identifier, reason=s.reason) for s in session.skipped],
    )

@app.post("/debug")
def debug(request: SearchRequest):
    """Segmentation diagnostics per document and the section trace per found paragraph."""
    session = _run_search(request)
    return {
        "term": session.query.normalized,
        "segmentation": [
            {"document": identifier, **asdict(diagnostics)}
            for identifier, diagnostics in session.segmentation
        ],
        "traces": [
            {
                "document": t.document_identifier,
                "paragraph_index": t.paragraph_index,
                "contains_pipe": t.contains_pipe,
                "split_count": t.split_count,
                "sections": [
                    {"text": section, "decision": decision.value}
                    for section, decision in t.sections
                ],
                "final_paragraph": t.final_paragraph,
            }
            for t in session.traces
        ],
    }

@app.post("/export/{fmt}")
def export(fmt: str, request: SearchRequest):
    """Render the search results as DOCX or PDF and return the file."""
    if fmt not in EXPORT_MEDIA_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown export format '{fmt}'")

    session = _run_search(request)
    try:
        if fmt == "docx":
            content = DocxExporter().to_bytes(StructuralRenderer().render(session))
        else:
            layout = PaginatedRenderer(PyMuPDFTextMeasure()).render(session)
            content = PdfExporter().to_bytes(layout)
    except Exception as e:
        print(f"[API] Export to {fmt} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Export failed: {str(e)}")

    filename = build_export_filename(fmt)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
