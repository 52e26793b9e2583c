"""
Crossref works search, the candidate retrieval collaborator.

Endpoint: {base_url}/works?query.bibliographic=<title venue year>&rows=N

Returns raw CandidateEntry values in Crossref's relevance order. Scoring is
done by the core (cv_checker.core.similarity); Crossref's own score is ignored.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from cv_checker.core.schemas import PublicationRecord
from cv_checker.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class CandidateRetrievalError(Exception):
    """Lookup failed (network error, HTTP error, unreadable payload)."""


@dataclass(frozen=True)
class CandidateEntry:
    title: str
    authors: List[str] = field(default_factory=list)
    venue: Optional[str] = None
    year: Optional[int] = None
    external_id: Optional[str] = None


def _safe_year(value: Any) -> Optional[int]:
    try:
        year = int(value)
    except (TypeError, ValueError):
        return None
    return year if 1500 <= year <= 2100 else None


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _first(value: Any) -> str:
    if isinstance(value, list):
        return _text(value[0]) if value else ""
    return _text(value)


def _item_year(item: Dict[str, Any]) -> Optional[int]:
    # published-print, then published-online, then issued: { "date-parts": [[YYYY, MM, DD]] }
    for key in ("published-print", "published-online", "issued"):
        date = item.get(key)
        if not isinstance(date, dict):
            continue
        parts = date.get("date-parts")
        if parts and isinstance(parts, list) and isinstance(parts[0], list) and parts[0]:
            year = _safe_year(parts[0][0])
            if year:
                return year
    return None


def _item_authors(item: Dict[str, Any]) -> List[str]:
    names = []
    authors = item.get("author")
    if not isinstance(authors, list):
        return names
    for author in authors:
        if not isinstance(author, dict):
            continue
        full = " ".join(p for p in (_text(author.get("given")), _text(author.get("family"))) if p)
        if not full:
            full = _text(author.get("name"))
        if full:
            names.append(full)
    return names


def parse_works_items(payload: Dict[str, Any]) -> List[CandidateEntry]:
    """Map a Crossref /works response to candidate entries."""
    if not isinstance(payload, dict):
        return []
    message = payload.get("message")
    if not isinstance(message, dict):
        return []
    items = message.get("items")
    if not isinstance(items, list):
        return []
    out: List[CandidateEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        out.append(
            CandidateEntry(
                title=_first(item.get("title")),
                authors=_item_authors(item),
                venue=_first(item.get("container-title")) or None,
                year=_item_year(item),
                external_id=_text(item.get("DOI")) or None,
            )
        )
    return out


def build_query(record: PublicationRecord) -> str:
    parts = [record.title, record.venue, str(record.year) if record.year else ""]
    return " ".join(p for p in parts if p).strip()


class CrossrefClient:
    """Thin, mockable wrapper around the Crossref works API."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.base_url = self.settings.crossref_base_url.rstrip("/")

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"User-Agent": self.settings.user_agent, "Accept": "application/json"}
        last_exc: Optional[Exception] = None

        for attempt in range(self.settings.request_max_retries):
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self.settings.request_timeout)
                resp.raise_for_status()
                return resp.json()
            except (httpx.HTTPStatusError, httpx.RequestError) as exc:
                last_exc = exc
                logger.warning(
                    "Request to %s failed (attempt %d/%d): %s",
                    url, attempt + 1, self.settings.request_max_retries, exc,
                )
                if attempt < self.settings.request_max_retries - 1:
                    time.sleep(self.settings.request_retry_delay * (attempt + 1))
            except ValueError as exc:
                raise CandidateRetrievalError(f"Crossref returned a non-JSON response from {url}") from exc

        raise CandidateRetrievalError(
            f"Crossref request failed after {self.settings.request_max_retries} attempts"
        ) from last_exc

    def search(self, record: PublicationRecord) -> List[CandidateEntry]:
        query = build_query(record)
        if not query:
            logger.debug(f"Record {record.id} has nothing to search for")
            return []
        payload = self._get("works", {"query.bibliographic": query, "rows": self.settings.crossref_rows})
        try:
            entries = parse_works_items(payload)
        except (AttributeError, TypeError, ValueError, LookupError) as exc:
            raise CandidateRetrievalError(f"Unreadable Crossref payload for record {record.id}") from exc
        logger.debug(f"Crossref returned {len(entries)} item(s) for record {record.id}")
        return entries
