"""
Publication block segmentation.

Finds the publications part of a CV, splits it into sub-sections by the headings
ERAS uses (journal articles/abstracts, poster presentation, oral presentation)
and cuts the journal sub-sections into one fragment per publication entry.

Deterministic and rule-based: nothing here raises on odd input, it only
degrades to fewer or larger fragments.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cv_checker.core.text_normalization import apply_known_fixes, collapse_whitespace

logger = logging.getLogger(__name__)


HEADER_LINE_MAX = 80
END_HEADER_LINE_MAX = 60
DEFAULT_HEADING = "Publications"

# Sub-section kinds that go through structured field extraction.
# Poster and oral entries are not extracted.
EXTRACTABLE_KINDS = {"journal", "default"}


# ===== BLOCK START HEADERS (full-line match, case-insensitive) =====

SECTION_START_PATTERNS = [
    re.compile(r"(?:selected\s+|research\s+)?publications?(?:\s*(?:and|&)\s*presentations?)?", re.I),
    re.compile(r"peer[\s-]*reviewed\b.*", re.I),
    re.compile(r"journal\s+articles?(?:\s*/\s*abstracts?)?", re.I),
    re.compile(r"(?:published\s+|other\s+)?abstracts?", re.I),
    re.compile(r"poster\s+presentations?", re.I),
    re.compile(r"oral\s+presentations?", re.I),
    re.compile(r"(?:scientific\s+|scholarly\s+)?presentations?", re.I),
    re.compile(r"books?(?:\s*(?:and|&)\s*book\s+chapters?)?|book\s+chapters?", re.I),
]

# ===== NEXT MAJOR SECTION KEYWORDS =====

END_SECTION_KEYWORDS = {
    "education",
    "experience",
    "experiences",
    "employment",
    "award",
    "awards",
    "honor",
    "honors",
    "accomplishments",
    "references",
    "certification",
    "certifications",
    "licensure",
    "licenses",
    "membership",
    "memberships",
    "hobbies",
    "interests",
    "languages",
    "skills",
    "volunteer",
    "leadership",
    "training",
}

# ===== SUB-SECTION HEADINGS =====

# ERAS renders these inline after PDF extraction, e.g.
# "...Publication Status: Published. Poster Presentation Smith JA, ..."
INLINE_HEADING_RE = re.compile(
    r"[ \t]*(Peer Reviewed Journal Articles\s*/\s*Abstracts(?:\s*\(Other than Published\))?"
    r"|Poster Presentations?|Oral Presentations?)\b(?![ \t]*:)[ \t]*"
)

SUBSECTION_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("journal", re.compile(
        r"(?:peer[\s-]*reviewed\s+)?journal\s+articles?(?:\s*/\s*abstracts?)?(?:\s*\([^)]*\))?", re.I)),
    ("journal", re.compile(
        r"(?:peer[\s-]*reviewed\s+)?(?:published\s+|other\s+)?abstracts?(?:\s*\([^)]*\))?", re.I)),
    ("poster", re.compile(r"poster\s+presentations?", re.I)),
    ("oral", re.compile(r"oral\s+presentations?", re.I)),
]

# ===== ENTRY BOUNDARIES =====

# Status markers end an entry in the ERAS dialect: "Publication Status: Published."
STATUS_MARKER_RE = re.compile(r"Publication Status:\s*[^.\n]*\.?", re.I)
# Start of an author list: "Smith JA," / "O'Brien K,"
AUTHOR_LEAD_RE = re.compile(r"(?<![\w'-])[A-Z][^\W\d_]*(?:['-][^\W\d_]+)* [A-Z]{1,2},")
BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")


@dataclass(frozen=True)
class Subsection:
    heading: str
    kind: str  # journal | poster | oral | default
    text: str


@dataclass(frozen=True)
class Fragment:
    section: str
    text: str


def _header_text(line: str) -> str:
    return line.strip().rstrip(":").strip()


def is_publication_header(line: str) -> bool:
    """True when the whole line is a publications-type section header."""
    s = _header_text(line)
    if not s or len(s) > HEADER_LINE_MAX:
        return False
    return any(p.fullmatch(s) for p in SECTION_START_PATTERNS)


def is_next_section_header(line: str, previous_line: Optional[str] = None) -> bool:
    """
    True when the line starts the next major CV section (education, awards, ...).

    A title-cased candidate only counts when it follows a blank line or a line
    ending in sentence punctuation, so a wrapped journal name such as
    "Journal of Graduate Medical\\nEducation" does not end the block.
    ALL-CAPS headers are accepted without that check.
    """
    s = _header_text(line)
    if not s or len(s) > END_HEADER_LINE_MAX or not s[0].isupper() or s.endswith("."):
        return False
    words = re.findall(r"[A-Za-z]+", s)
    if not words or len(words) > 6:
        return False
    if not any(w.lower() in END_SECTION_KEYWORDS for w in words):
        return False
    if is_publication_header(s):
        return False
    if s.isupper():
        return True
    if previous_line is None:
        return True
    prev = previous_line.rstrip()
    return not prev or prev[-1] in ".:;)"


def reinject_headings(text: str) -> str:
    """Put known sub-headings that appear mid-line onto their own line."""
    if not text:
        return ""
    return INLINE_HEADING_RE.sub(lambda m: f"\n{m.group(1)}\n", text)


def extract_publication_block(text: str) -> str:
    """
    Return the publications block: from the first publications header line
    (inclusive) to the next major section header (exclusive).

    Falls back to the whole text when no publications header exists.
    """
    lines = text.split("\n")

    start = None
    for idx, line in enumerate(lines):
        if is_publication_header(line):
            start = idx
            break

    if start is None:
        logger.info("No publications header found; treating the whole input as the publications block")
        return text

    end = len(lines)
    for idx in range(start + 1, len(lines)):
        if is_next_section_header(lines[idx], lines[idx - 1]):
            end = idx
            break

    logger.debug(f"Publications block spans lines {start}..{end} of {len(lines)}")
    return "\n".join(lines[start:end])


def _recognize_subsection(line: str) -> Optional[Tuple[str, str]]:
    s = _header_text(line)
    if not s or len(s) > HEADER_LINE_MAX:
        return None
    for kind, pattern in SUBSECTION_PATTERNS:
        if pattern.fullmatch(s):
            return kind, s
    return None


def split_subsections(block: str) -> List[Subsection]:
    """Split a publications block into sub-sections keyed by their heading."""
    out: List[Subsection] = []
    heading, kind = DEFAULT_HEADING, "default"
    buffer: List[str] = []

    for line in block.split("\n"):
        recognized = _recognize_subsection(line)
        if recognized:
            body = "\n".join(buffer).strip()
            if body:
                out.append(Subsection(heading=heading, kind=kind, text=body))
            buffer = []
            kind, heading = recognized
            continue
        if is_publication_header(line):
            # Generic headers ("Publications", "Presentations") carry no entry text
            continue
        buffer.append(line)

    body = "\n".join(buffer).strip()
    if body:
        out.append(Subsection(heading=heading, kind=kind, text=body))
    return out


def _cut(text: str, positions: List[int]) -> List[str]:
    chunks = []
    prev = 0
    for pos in positions:
        chunks.append(text[prev:pos])
        prev = pos
    chunks.append(text[prev:])
    return [c for c in chunks if c.strip()]


def _author_lead_positions(text: str) -> List[int]:
    positions = []
    for m in AUTHOR_LEAD_RE.finditer(text):
        before = text[:m.start()].rstrip(" \t")
        # Only a lead at the start of a line or right after a sentence end
        if not before or before[-1] in "\n.;":
            positions.append(m.start())
    return positions


def split_entries(text: str) -> List[str]:
    """
    Cut a sub-section into entry fragments.

    Order of preference:
    1. after each "Publication Status: ... ." marker (when there are 2+ markers)
    2. at each author-list start ("Smith JA,")
    3. at blank lines
    4. the whole sub-section as one fragment

    Fragments without a status marker are dropped when any fragment has one.
    """
    if not text or not text.strip():
        return []

    status_ends = [m.end() for m in STATUS_MARKER_RE.finditer(text)]
    chunks: List[str] = []
    if len(status_ends) > 1:
        chunks = _cut(text, status_ends)
        logger.debug(f"Split on {len(status_ends)} status markers")
    if len(chunks) <= 1:
        by_author = _cut(text, [p for p in _author_lead_positions(text) if p > 0])
        if len(by_author) > 1:
            chunks = by_author
            logger.debug(f"Split on {len(by_author)} author-list starts")
    if len(chunks) <= 1:
        by_blank = [c for c in BLANK_LINE_RE.split(text) if c.strip()]
        if len(by_blank) > 1:
            chunks = by_blank
            logger.debug(f"Split on {len(by_blank)} blank lines")
    if len(chunks) <= 1:
        chunks = [text]

    if any(STATUS_MARKER_RE.search(c) for c in chunks):
        kept = [c for c in chunks if STATUS_MARKER_RE.search(c)]
        if len(kept) < len(chunks):
            logger.debug(f"Dropped {len(chunks) - len(kept)} fragment(s) without a status marker")
        chunks = kept

    return [frag for frag in (collapse_whitespace(c) for c in chunks) if frag]


def segment_publications(text: str) -> List[Fragment]:
    """
    Turn normalized CV text into ordered, section-tagged entry fragments.

    Poster and oral presentation sub-sections are skipped.
    """
    if not text or not text.strip():
        return []

    text = reinject_headings(apply_known_fixes(text))
    block = extract_publication_block(text)

    fragments: List[Fragment] = []
    for sub in split_subsections(block):
        if sub.kind not in EXTRACTABLE_KINDS:
            logger.debug(f"Skipping '{sub.heading}' sub-section ({sub.kind})")
            continue
        for entry in split_entries(sub.text):
            fragments.append(Fragment(section=sub.heading, text=entry))

    logger.debug(f"Segmented {len(fragments)} publication fragment(s)")
    return fragments
