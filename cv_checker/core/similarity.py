"""
String similarity and candidate ranking.

All scores are in [0, 1] and rounded to 3 decimals so rankings are stable and
easy to read in reports.

    similarity = 0.6 * token Jaccard + 0.4 * character-bigram Dice
    composite  = 0.6 * title similarity + 0.25 * venue similarity + 0.15 * year proximity
"""

import re
from collections import Counter
from typing import Iterable, List, Optional, Protocol, Sequence

from cv_checker.core.schemas import ExternalCandidate, PublicationRecord


TOKEN_WEIGHT = 0.6
BIGRAM_WEIGHT = 0.4

TITLE_WEIGHT = 0.6
VENUE_WEIGHT = 0.25
YEAR_WEIGHT = 0.15

NEUTRAL_YEAR_SCORE = 0.4


class CandidateFields(Protocol):
    title: str
    authors: Sequence[str]
    venue: Optional[str]
    year: Optional[int]
    external_id: Optional[str]


def normalize_for_similarity(value: Optional[str]) -> str:
    value = (value or "").lower()
    value = re.sub(r"[^a-z0-9\s]", " ", value)
    return re.sub(r"\s+", " ", value).strip()


def jaccard_similarity(a: str, b: str) -> float:
    """Jaccard index of the normalized token sets."""
    set_a = set(normalize_for_similarity(a).split())
    set_b = set(normalize_for_similarity(b).split())
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def _bigrams(text: str) -> Counter:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """Dice coefficient over character bigrams of the normalized strings."""
    a = normalize_for_similarity(a)
    b = normalize_for_similarity(b)
    if len(a) < 2 or len(b) < 2:
        return 1.0 if a == b else 0.0
    overlap = sum((_bigrams(a) & _bigrams(b)).values())
    return (2.0 * overlap) / ((len(a) - 1) + (len(b) - 1))


def similarity_score(a: Optional[str], b: Optional[str]) -> float:
    """0 when either side has no letters or digits left after normalization."""
    if not normalize_for_similarity(a) or not normalize_for_similarity(b):
        return 0.0
    score = TOKEN_WEIGHT * jaccard_similarity(a, b) + BIGRAM_WEIGHT * dice_coefficient(a, b)
    return round(score, 3)


def year_proximity_score(expected: Optional[int], actual: Optional[int]) -> float:
    if not expected or not actual:
        return NEUTRAL_YEAR_SCORE
    diff = abs(expected - actual)
    if diff == 0:
        return 1.0
    if diff == 1:
        return 0.8
    if diff == 2:
        return 0.6
    if diff <= 4:
        return 0.4
    return 0.2


def composite_score(
    record: PublicationRecord,
    title: Optional[str],
    venue: Optional[str],
    year: Optional[int],
) -> float:
    """Weighted title/venue similarity plus year proximity for one candidate."""
    score = (
        TITLE_WEIGHT * similarity_score(record.title, title)
        + VENUE_WEIGHT * similarity_score(record.venue, venue)
        + YEAR_WEIGHT * year_proximity_score(record.year, year)
    )
    return min(1.0, max(0.0, round(score, 3)))


def rank_candidates(
    record: PublicationRecord,
    entries: Iterable[CandidateFields],
    source_name: str = "Crossref",
) -> List[ExternalCandidate]:
    """
    Score raw retrieval entries against a record.

    Returns candidates sorted by descending composite score; equal scores keep
    the retrieval order.
    """
    candidates = [
        ExternalCandidate(
            external_id=entry.external_id,
            title=entry.title or "",
            authors=list(entry.authors or []),
            venue=entry.venue,
            year=entry.year,
            score=composite_score(record, entry.title, entry.venue, entry.year),
            source_name=source_name,
        )
        for entry in entries
    ]
    return sorted(candidates, key=lambda c: c.score, reverse=True)
