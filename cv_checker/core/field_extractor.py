"""
Field extraction for a single publication fragment.

The fragment is consumed by a fixed sequence of named stages. Each stage takes
a PartialRecord and returns a new one, so every stage can be tested alone and
extract_fields() is just their composition:

    prepare -> extract_status -> extract_authors -> extract_title_and_venue
            -> extract_year -> extract_type_hint

Stages never raise. A piece that cannot be found is left empty/None and the
next stage carries on with whatever remainder is left.
"""

import re
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from cv_checker.core.text_normalization import apply_known_fixes, collapse_whitespace


STATUS_RE = re.compile(r"Publication Status:\s*([^.]*)(?:\.|$)", re.I)
LEADING_AUTHORS_RE = re.compile(r"^([^.]*)\.\s*(.*)$", re.S)
AUTHOR_SPLIT_RE = re.compile(r",|;|\s+and\s+", re.I)
# Letters, spaces, hyphens and apostrophes survive in author names
AUTHOR_JUNK_RE = re.compile(r"[^\w\s'\u2019-]|[\d_]")

POSTER_MARKER_RE = re.compile(r"Poster presented\s*:", re.I)
ORAL_MARKER_RE = re.compile(r"Oral presentation\s*:", re.I)
POSTER_HINT_RE = re.compile(r"poster\s+presented", re.I)
ORAL_HINT_RE = re.compile(r"oral\s+presentation", re.I)

DATE_PATTERN = r"\d{1,2}/\d{1,2}/\d{2,4}"
TRAILING_DATE_RE = re.compile(r"\s*;?\s*" + DATE_PATTERN + r"\.?\s*$")
# ". Boston, MA; 05/12/2019." at the end of a poster entry
TRAILING_LOCATION_DATE_RE = re.compile(r"\.\s*[^.;]*;\s*" + DATE_PATTERN + r"\.?\s*$")
TRAILING_PUBLISHED_RE = re.compile(r"[\s.]*\bPublished\.?\s*$", re.I)

TITLE_SPLIT_RE = re.compile(r"^(.+?[.?!])\s+(.*)$", re.S)
MONTH_RE = re.compile(
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
YEAR_RE = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")

# Lowercase words allowed inside a journal/venue name
VENUE_CONNECTORS = {"of", "and", "the", "&", "in", "for", "on", "de", "la", "der", "und", "et", "y"}


@dataclass(frozen=True)
class PartialRecord:
    source: str = ""  # prepared fragment text, never consumed
    remainder: str = ""  # text not yet assigned to a field
    authors: Tuple[str, ...] = ()
    title: str = ""
    venue: str = ""
    year: Optional[int] = None
    status: Optional[str] = None
    type_hint: Optional[str] = None


def _strip_edges(text: str) -> str:
    return (text or "").strip(" \t.,;:")


def _clean_author(token: str) -> str:
    return collapse_whitespace(AUTHOR_JUNK_RE.sub("", token))


# ===== STAGES =====

def prepare(text: Optional[str]) -> PartialRecord:
    compact = collapse_whitespace(apply_known_fixes(text or ""))
    return PartialRecord(source=compact, remainder=compact)


def extract_status(partial: PartialRecord) -> PartialRecord:
    """Pull "Publication Status: <status>." out of the remainder."""
    m = STATUS_RE.search(partial.remainder)
    if not m:
        return partial
    status = m.group(1).strip() or None
    remainder = collapse_whitespace(partial.remainder[:m.start()] + " " + partial.remainder[m.end():])
    return replace(partial, status=status, remainder=remainder)


def extract_authors(partial: PartialRecord) -> PartialRecord:
    """
    Leading author list: everything up to the first period.

    Order is kept exactly as written; it is what position verification checks.
    """
    m = LEADING_AUTHORS_RE.match(partial.remainder)
    if not m:
        return partial
    authors = tuple(a for a in (_clean_author(tok) for tok in AUTHOR_SPLIT_RE.split(m.group(1))) if a)
    return replace(partial, authors=authors, remainder=m.group(2).strip())


def _split_venue_detail(rest: str) -> Tuple[str, str]:
    """
    Split "J Med. 2020 Jan;12(3):45-50" into venue "J Med" and detail "2020 Jan;12(3):45-50".

    The venue is the leading run of capitalized words (plus connectors such as
    "of"); it ends at a month name, a token starting with a digit, or a
    lowercase word.
    """
    tokens = rest.split()
    cut = len(tokens)
    for i, tok in enumerate(tokens):
        word = tok.lstrip("([\"'")
        if not word:
            continue
        bare = word.rstrip(".,;:)")
        if MONTH_RE.fullmatch(bare) or word[0].isdigit():
            cut = i
            break
        if word[0].islower() and bare.lower() not in VENUE_CONNECTORS:
            cut = i
            break
    return _strip_edges(" ".join(tokens[:cut])), _strip_edges(" ".join(tokens[cut:]))


def _strip_location_and_date(text: str) -> str:
    m = TRAILING_LOCATION_DATE_RE.search(text)
    if m:
        return text[:m.start()]
    return TRAILING_DATE_RE.sub("", text)


def extract_title_and_venue(partial: PartialRecord) -> PartialRecord:
    """
    Title and venue from the remainder.

    - "<title>. Oral presentation: <venue>; MM/DD/YYYY"
    - "<venue>. Poster presented: <title>. <location>; MM/DD/YYYY."
    - otherwise "<title>. <venue>. <detail>"
    """
    rest = partial.remainder
    oral = ORAL_MARKER_RE.search(rest)
    poster = POSTER_MARKER_RE.search(rest)

    if oral and (not poster or oral.start() < poster.start()):
        title = _strip_edges(rest[:oral.start()])
        venue = _strip_edges(TRAILING_DATE_RE.sub("", rest[oral.end():]))
        return replace(partial, title=title, venue=venue, remainder="")

    if poster:
        venue = _strip_edges(rest[:poster.start()])
        after = _strip_location_and_date(rest[poster.end():])
        after = TRAILING_PUBLISHED_RE.sub("", after)
        return replace(partial, title=_strip_edges(after), venue=venue, remainder="")

    m = TITLE_SPLIT_RE.match(rest)
    if not m:
        return replace(partial, title=_strip_edges(rest), remainder="")

    # "?" and "!" belong to the title, the closing period does not
    title = _strip_edges(m.group(1))
    venue, detail = _split_venue_detail(m.group(2))
    if venue and detail:
        venue = f"{venue}. {detail}"
    else:
        venue = venue or detail
    return replace(partial, title=title, venue=venue, remainder="")


def extract_year(partial: PartialRecord) -> PartialRecord:
    m = YEAR_RE.search(partial.source)
    if not m:
        return partial
    return replace(partial, year=int(m.group(1)))


def extract_type_hint(partial: PartialRecord) -> PartialRecord:
    if POSTER_HINT_RE.search(partial.source):
        return replace(partial, type_hint="poster")
    if ORAL_HINT_RE.search(partial.source):
        return replace(partial, type_hint="oral")
    return partial


STAGES: Tuple[Callable[[PartialRecord], PartialRecord], ...] = (
    extract_status,
    extract_authors,
    extract_title_and_venue,
    extract_year,
    extract_type_hint,
)


def extract_fields(fragment: Optional[str]) -> PartialRecord:
    """Run every extraction stage over one fragment."""
    partial = prepare(fragment)
    for stage in STAGES:
        partial = stage(partial)
    return partial
