"""
CV text -> publication records.

Composition of the normalizer, segmenter and field extractor. Record ids are
assigned here, once per fragment.
"""

import logging
import re
from typing import List, Optional, Tuple

from cv_checker.core.field_extractor import extract_fields
from cv_checker.core.schemas import PublicationRecord, PublicationType
from cv_checker.core.segmenter import segment_publications
from cv_checker.core.text_normalization import normalize_text

logger = logging.getLogger(__name__)


TYPE_RULES: List[Tuple[re.Pattern, PublicationType]] = [
    (re.compile(r"poster", re.I), "poster"),
    (re.compile(r"oral", re.I), "oral"),
    (re.compile(r"journal|article|abstract", re.I), "journal"),
]


def infer_type(section: str, hint: Optional[str] = None) -> PublicationType:
    """Type hint from the entry wins, then the section heading, then 'other'."""
    if hint in ("journal", "poster", "oral", "other"):
        return hint
    for pattern, pub_type in TYPE_RULES:
        if pattern.search(section or ""):
            return pub_type
    return "other"


def parse_publications(raw: Optional[str]) -> List[PublicationRecord]:
    """Parse free-form CV text into publication records, in source order."""
    text = normalize_text(raw)
    records: List[PublicationRecord] = []

    for fragment in segment_publications(text):
        fields = extract_fields(fragment.text)
        records.append(
            PublicationRecord(
                raw_text=fragment.text,
                section=fragment.section,
                type=infer_type(fragment.section, fields.type_hint),
                title=fields.title,
                authors=list(fields.authors),
                venue=fields.venue,
                year=fields.year,
                status=fields.status,
            )
        )

    logger.info(f"Parsed {len(records)} publication record(s)")
    return records
