from io import BytesIO
import logging
from typing import Any, Dict, List

import pdfplumber

logger = logging.getLogger(__name__)


# Horizontal gap (points) above which two words on one line get a space between them
WORD_GAP_THRESHOLD = 1.0
# Words whose tops differ by less than this belong to the same visual line
LINE_Y_TOLERANCE = 3.0
# Vertical gap, relative to line height, that starts a new paragraph (blank line)
PARAGRAPH_GAP_RATIO = 0.8


class PdfExtractionError(Exception):
    """The PDF could not be read (encrypted, corrupt, not a PDF)."""


def _group_lines(words: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
    """Group word objects into visual lines by their `top` coordinate, left-to-right."""
    lines: List[List[Dict[str, Any]]] = []
    for w in sorted(words, key=lambda w: (w["top"], w["x0"])):
        if lines and abs(w["top"] - lines[-1][0]["top"]) <= LINE_Y_TOLERANCE:
            lines[-1].append(w)
        else:
            lines.append([w])
    return [sorted(line, key=lambda w: w["x0"]) for line in lines]


def _join_line(line: List[Dict[str, Any]]) -> str:
    parts: List[str] = []
    prev = None
    for w in line:
        if prev is not None and w["x0"] - prev["x1"] > WORD_GAP_THRESHOLD:
            parts.append(" ")
        parts.append(w["text"])
        prev = w
    return "".join(parts)


def words_to_text(words: List[Dict[str, Any]]) -> str:
    """
    Rebuild page text from pdfplumber word objects.

    Words on the same visual line are ordered left-to-right; a blank line is
    inserted where the vertical gap between lines is large.
    """
    if not words:
        return ""

    out: List[str] = []
    prev_line = None
    for line in _group_lines(words):
        if prev_line is not None:
            prev_bottom = max(w["bottom"] for w in prev_line)
            height = max(w["bottom"] - w["top"] for w in prev_line) or 1.0
            if min(w["top"] for w in line) - prev_bottom > height * PARAGRAPH_GAP_RATIO:
                out.append("")
        out.append(_join_line(line))
        prev_line = line
    return "\n".join(out)


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """
    Extract plain text from a PDF, pages in order, joined with newlines.

    Raises PdfExtractionError for encrypted or corrupt documents.
    """
    pages: List[str] = []
    try:
        with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
            for page in pdf.pages:
                words = page.extract_words(x_tolerance=1.5, y_tolerance=2, keep_blank_chars=False)
                pages.append(words_to_text(words))
    except Exception as exc:
        logger.warning(f"PDF extraction failed: {exc}")
        raise PdfExtractionError("Could not read that PDF. Please ensure it is not password protected.") from exc

    logger.debug(f"Extracted text from {len(pages)} PDF page(s)")
    return "\n".join(pages)
