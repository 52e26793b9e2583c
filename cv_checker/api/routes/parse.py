from fastapi import APIRouter, UploadFile, File, HTTPException

from cv_checker.core.docx_extractor import extract_docx_text
from cv_checker.core.pdf_extractor import PdfExtractionError, extract_pdf_text
from cv_checker.core.publication_parser import parse_publications
from cv_checker.core.schemas import ParseResponse, ParseTextRequest

router = APIRouter(tags=["parse"])


def _to_response(text: str) -> ParseResponse:
    publications = parse_publications(text)
    warnings = []
    if not publications:
        warnings.append("No publication entries were found in the text.")
    return ParseResponse(publications=publications, warnings=warnings)


@router.post(
    "/parse",
    response_model=ParseResponse,
    summary="Parse CV File",
    description="Extract publication records from a CV file (PDF, DOCX, or TXT). ERAS PDF exports are the primary target.",
    responses={
        400: {"description": "Empty file uploaded"},
        415: {"description": "Unsupported file format"},
        422: {"description": "File has no extractable text or could not be read"}
    }
)
async def parse_cv(
    file: UploadFile = File(..., description="CV file (PDF, DOCX, or TXT format)")
):
    """
    Parse a CV file and extract its publication list.

    **Supported formats:**
    - PDF (.pdf) - Text-layer extraction only, OCR not supported
    - DOCX (.docx)
    - TXT (.txt)
    """
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file uploaded.")

    filename = (file.filename or "").lower()
    content_type = (file.content_type or "").lower()

    # PDF
    if filename.endswith(".pdf") or content_type == "application/pdf":
        try:
            text = extract_pdf_text(raw)
        except PdfExtractionError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        if not text.strip():
            raise HTTPException(
                status_code=422,
                detail="PDF appears to have no extractable text. OCR is not supported."
            )
        return _to_response(text)

    # DOCX
    if filename.endswith(".docx") or content_type in {
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    }:
        return _to_response(extract_docx_text(raw))

    # Text
    if content_type in {"text/plain", "text/markdown"} or filename.endswith((".txt", ".md")):
        return _to_response(raw.decode("utf-8", errors="replace"))

    raise HTTPException(status_code=415, detail=f"Unsupported content type for now: {file.content_type}")


@router.post("/parse/text", response_model=ParseResponse, summary="Parse Pasted CV Text")
def parse_cv_text(payload: ParseTextRequest):
    return _to_response(payload.text)
