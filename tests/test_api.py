# tests/test_api.py

import io

import pytest
from fastapi.testclient import TestClient

import api


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "alpha.md").write_text(
        "First paragraph mentions Term.\n\nNothing here.\n\nIntro | term section | other",
        encoding="utf-8",
    )
    (directory / "beta.txt").write_text("no match at all", encoding="utf-8")
    monkeypatch.setattr(api, "DATA_DIRECTORY", str(directory))
    return directory


@pytest.fixture
def client(data_dir) -> TestClient:
    return TestClient(api.app)


# ── Documents ─────────────────────────────────────────────────────────────────

def test_root_reports_document_count(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["documents"] == 2


def test_list_documents(client):
    names = [d["filename"] for d in client.get("/documents").json()["documents"]]
    assert names == ["alpha.md", "beta.txt"]


def test_upload_stores_supported_and_rejects_others(client, data_dir):
    response = client.post(
        "/upload",
        files=[
            ("files", ("gamma.txt", io.BytesIO(b"term in gamma"), "text/plain")),
            ("files", ("image.png", io.BytesIO(b"\x89PNG"), "image/png")),
        ],
    )

    body = response.json()
    assert response.status_code == 200
    assert body["files"] == ["gamma.txt"]
    assert body["rejected"][0]["filename"] == "image.png"
    assert (data_dir / "gamma.txt").read_text() == "term in gamma"
    assert not (data_dir / "image.png").exists()


def test_delete_document(client, data_dir):
    assert client.delete("/documents/beta.txt").status_code == 200
    assert not (data_dir / "beta.txt").exists()


def test_delete_missing_document_is_404(client):
    assert client.delete("/documents/missing.md").status_code == 404


def test_delete_directory_is_404(client, data_dir):
    (data_dir / "archive").mkdir()

    assert client.delete("/documents/archive").status_code == 404
    assert (data_dir / "archive").is_dir()


# ── Search ────────────────────────────────────────────────────────────────────

def test_search_returns_paragraphs_and_statistics(client):
    response = client.post("/search", json={"term": "term"})

    body = response.json()
    assert response.status_code == 200
    assert body["statistics"] == {
        "document_count": 2,
        "total_found_paragraphs": 2,
        "total_occurrences": 2,
    }
    alpha = next(r for r in body["results"] if r["document"] == "alpha.md")
    assert alpha["found_paragraphs"] == [
        "First paragraph mentions Term.",
        "Intro term section",
    ]
    assert alpha["total_paragraphs"] == 3


def test_search_selected_documents_reports_missing(client):
    body = client.post(
        "/search", json={"term": "term", "documents": ["alpha.md", "ghost.md"]}
    ).json()

    assert [r["document"] for r in body["results"]] == ["alpha.md"]
    assert body["skipped"] == [{"identifier": "ghost.md", "reason": "document unavailable"}]


def test_search_with_empty_selection_does_nothing(client):
    body = client.post("/search", json={"term": "term", "documents": []}).json()

    assert body["results"] == []
    assert body["statistics"]["document_count"] == 0


@pytest.mark.parametrize("term", ["", "   "])
def test_blank_term_is_rejected(client, term):
    assert client.post("/search", json={"term": term}).status_code == 400


def test_debug_includes_segmentation_and_traces(client):
    body = client.post("/debug", json={"term": "TERM"}).json()

    assert body["term"] == "term"
    assert {s["document"] for s in body["segmentation"]} == {"alpha.md", "beta.txt"}
    triggered = [t for t in body["traces"] if t["sections"]]
    assert [s["decision"] for s in triggered[0]["sections"]] == ["BASE", "MATCH", "SKIP"]


# ── Export ────────────────────────────────────────────────────────────────────

def test_export_docx(client):
    response = client.post("/export/docx", json={"term": "term"})

    assert response.status_code == 200
    assert response.content[:2] == b"PK"
    assert "lexical-search-results-" in response.headers["content-disposition"]


def test_export_pdf(client):
    response = client.post("/export/pdf", json={"term": "term"})

    assert response.status_code == 200
    assert response.content[:4] == b"%PDF"
    assert response.headers["content-type"] == "application/pdf"


def test_export_unknown_format_is_404(client):
    assert client.post("/export/odt", json={"term": "term"}).status_code == 404
