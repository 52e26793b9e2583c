"""
Batch orchestration: candidate lookups for many records, then verification.

Lookups are independent, so they may run on a bounded thread pool. Results are
merged back by position. A failed lookup is recorded on that record's match
state and never stops the batch.
"""

import concurrent.futures
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from cv_checker.core.author_matcher import verify_publication
from cv_checker.core.crossref import CandidateRetrievalError
from cv_checker.core.matching import DEFAULT_AUTO_SELECT_MARGIN, build_match_state, selected_candidate
from cv_checker.core.schemas import (
    ExternalCandidate,
    MatchState,
    OwnerProfile,
    PublicationRecord,
    VerificationSummary,
    VerificationVerdict,
)
from cv_checker.core.similarity import CandidateFields

logger = logging.getLogger(__name__)


SearchFn = Callable[[PublicationRecord], Iterable[CandidateFields]]
ProgressFn = Callable[[int, int, PublicationRecord], None]


def _lookup(record: PublicationRecord, search: SearchFn, margin: float, source_name: str) -> PublicationRecord:
    try:
        entries = list(search(record))
    except CandidateRetrievalError as exc:
        logger.warning(f"Candidate lookup failed for record {record.id}: {exc}")
        return record.model_copy(update={"match": MatchState(error=str(exc))})
    state = build_match_state(record, entries, margin=margin, source_name=source_name)
    return record.model_copy(update={"match": state})


def match_publications(
    records: Sequence[PublicationRecord],
    search: SearchFn,
    margin: float = DEFAULT_AUTO_SELECT_MARGIN,
    source_name: str = "Crossref",
    max_workers: int = 1,
    on_progress: Optional[ProgressFn] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[PublicationRecord]:
    """
    Look up and rank candidates for every record.

    Returns new records in input order. When `should_stop` turns true, records
    not yet looked up are returned unchanged.
    """
    total = len(records)
    results: List[PublicationRecord] = list(records)
    done = 0

    if max_workers <= 1:
        for idx, record in enumerate(records):
            if should_stop and should_stop():
                logger.info(f"Lookup stopped after {done}/{total} record(s)")
                break
            results[idx] = _lookup(record, search, margin, source_name)
            done += 1
            if on_progress:
                on_progress(done, total, results[idx])
        return results

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
        future_to_idx = {}
        for idx, record in enumerate(records):
            if should_stop and should_stop():
                logger.info(f"Lookup stopped after submitting {idx}/{total} record(s)")
                break
            future_to_idx[ex.submit(_lookup, record, search, margin, source_name)] = idx

        for future in concurrent.futures.as_completed(future_to_idx):
            idx = future_to_idx[future]
            results[idx] = future.result()
            done += 1
            if on_progress:
                on_progress(done, total, results[idx])

    return results


def verify_publications(
    records: Sequence[PublicationRecord],
    policy: str = "alignment",
    owner: Optional[OwnerProfile] = None,
) -> List[Tuple[PublicationRecord, Optional[VerificationVerdict], Optional[ExternalCandidate]]]:
    """(record, verdict, selected candidate) per record; records without a selection get no verdict."""
    rows = []
    for record in records:
        candidate = selected_candidate(record)
        verdict = None
        if candidate is not None:
            verdict = verify_publication(record.authors, candidate.authors, policy=policy, owner=owner)
        rows.append((record, verdict, candidate))
    return rows


def summarize(verdicts: Iterable[Optional[VerificationVerdict]]) -> VerificationSummary:
    summary = VerificationSummary()
    for verdict in verdicts:
        summary.total += 1
        if verdict is None:
            summary.unmatched += 1
        elif verdict.status == "good":
            summary.good += 1
        elif verdict.status == "warning":
            summary.warning += 1
        else:
            summary.bad += 1
    return summary
