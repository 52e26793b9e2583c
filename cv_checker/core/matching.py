"""
Candidate selection and match-state handling.

A record's MatchState owns its ranked candidates; the selection is only the id
of one of them.
"""

import logging
from typing import Iterable, Optional, Sequence

from cv_checker.core.schemas import ExternalCandidate, MatchState, PublicationRecord
from cv_checker.core.similarity import CandidateFields, rank_candidates

logger = logging.getLogger(__name__)


DEFAULT_AUTO_SELECT_MARGIN = 0.1


class CandidateNotFoundError(Exception):
    """Raised when a selection refers to a candidate the match state does not hold."""


def pick_best(
    candidates: Sequence[ExternalCandidate],
    margin: float = DEFAULT_AUTO_SELECT_MARGIN,
) -> Optional[ExternalCandidate]:
    """
    Auto-select the top candidate of an already sorted list.

    The top candidate is returned only when it is alone or when it beats the
    runner-up by more than `margin`. Otherwise the match is ambiguous and None
    is returned so a person has to choose.
    """
    if not candidates:
        return None
    first = candidates[0]
    if len(candidates) == 1:
        return first
    # Gap is rounded so 0.8 vs 0.7 does not pass on float noise
    gap = round(first.score - candidates[1].score, 3)
    return first if gap > margin else None


def build_match_state(
    record: PublicationRecord,
    entries: Iterable[CandidateFields],
    margin: float = DEFAULT_AUTO_SELECT_MARGIN,
    source_name: str = "Crossref",
) -> MatchState:
    """Rank retrieval entries for a record and auto-select when confident."""
    candidates = rank_candidates(record, entries, source_name=source_name)
    best = pick_best(candidates, margin=margin)
    if best is None and candidates:
        logger.debug(f"Ambiguous match for record {record.id}: top scores "
                     f"{[c.score for c in candidates[:2]]}")
    return MatchState(
        candidates=candidates,
        selected_id=best.id if best else None,
        auto_selected=best is not None,
    )


def select_candidate(state: MatchState, candidate_id: str) -> MatchState:
    """Manual selection: returns a new state pointing at `candidate_id`."""
    if not any(c.id == candidate_id for c in state.candidates):
        raise CandidateNotFoundError(f"No candidate with id {candidate_id!r}")
    return state.model_copy(update={"selected_id": candidate_id, "auto_selected": False})


def selected_candidate(record: PublicationRecord) -> Optional[ExternalCandidate]:
    if record.match is None:
        return None
    return record.match.selected()
