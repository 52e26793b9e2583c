"""
Text normalization for pasted or PDF-extracted CV text.

Two entry points:
- normalize_text(): line-ending/hyphenation/wrapped-line cleanup, idempotent
- apply_known_fixes(): exact substitutions for extraction breaks seen in ERAS exports
"""

import re
from typing import Optional


SOFT_HYPHEN = "\u00ad"

TRAILING_BLANKS_RE = re.compile(r"[ \t]+\n")
# "treat-\nment" -> "treatment"; lookarounds so chained breaks resolve in one pass
HYPHEN_BREAK_RE = re.compile(r"(?<=[A-Za-z])-[ \t]*\n[ \t]*(?=[A-Za-z])")
# "a study of\nthings" -> "a study of things"
WRAPPED_LINE_RE = re.compile(r"(?<=\S)[ \t]*\n[ \t]*(?=[a-z])")


# Exact fixes for breaks that survive normalization (highest precision)
KNOWN_ARTIFACT_FIXES = {
    "Publication Sta tus": "Publication Status",
    "Publica tion Status": "Publication Status",
    "Poster pre sented": "Poster presented",
    "Oral presen tation": "Oral presentation",
    "Peer Reviewed Journal Articles/ Abstracts": "Peer Reviewed Journal Articles/Abstracts",
}


def normalize_text(raw: Optional[str]) -> str:
    """
    Canonicalize raw CV text.

    - CRLF / CR line endings -> LF
    - soft hyphen characters removed
    - trailing blanks before a newline removed
    - hyphenated line breaks rejoined ("word-\\nword" -> "wordword")
    - a line break followed by a lowercase continuation becomes a single space

    Normalizing already-normalized text returns it unchanged.
    """
    if not raw:
        return ""

    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace(SOFT_HYPHEN, "")
    text = TRAILING_BLANKS_RE.sub("\n", text)
    text = HYPHEN_BREAK_RE.sub("", text)
    text = WRAPPED_LINE_RE.sub(" ", text)
    return text


def apply_known_fixes(text: str) -> str:
    """Replace known extraction artifacts with their intended text."""
    if not text:
        return text
    for broken, fixed in KNOWN_ARTIFACT_FIXES.items():
        if broken in text:
            text = text.replace(broken, fixed)
    return text


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()
