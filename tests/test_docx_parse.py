from io import BytesIO
from docx import Document
from fastapi.testclient import TestClient
from cv_checker.core.docx_extractor import extract_docx_text
from cv_checker.main import app

client = TestClient(app)

def _cv_docx() -> bytes:
    doc = Document()
    doc.add_paragraph("John Doe, MD")
    doc.add_paragraph("Peer Reviewed Journal Articles/Abstracts")
    doc.add_paragraph("Smith JA, Doe RK. A Study of Things. J Med. 2020. Publication Status: Published.")
    doc.add_paragraph("Lee B, Doe RK. Second study. Surgery. 2021. Publication Status: Accepted.")
    doc.add_paragraph("")
    doc.add_paragraph("Awards and Honors")
    doc.add_paragraph("Dean's List")

    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()

def test_extract_docx_text_keeps_paragraph_lines():
    text = extract_docx_text(_cv_docx())
    lines = text.split("\n")
    assert lines[0] == "John Doe, MD"
    assert lines[4] == ""

def test_parse_docx_extracts_publications():
    files = {
        "file": ("cv.docx", _cv_docx(), "application/vnd.openxmlformats-officedocument.wordprocessingml.document")
    }
    r = client.post("/parse", files=files)
    assert r.status_code == 200
    data = r.json()

    assert [p["title"] for p in data["publications"]] == ["A Study of Things", "Second study"]
    assert data["publications"][1]["status"] == "Accepted"
    assert data["publications"][1]["venue"] == "Surgery. 2021"
