from fastapi import APIRouter, Depends, HTTPException

from cv_checker.core.crossref import CrossrefClient
from cv_checker.core.matching import CandidateNotFoundError, select_candidate
from cv_checker.core.pipeline import SearchFn, match_publications
from cv_checker.core.schemas import MatchRequest, MatchResponse, PublicationRecord, SelectRequest
from cv_checker.settings import Settings, get_settings

router = APIRouter(tags=["match"])


def get_candidate_search(settings: Settings = Depends(get_settings)) -> SearchFn:
    return CrossrefClient(settings).search


@router.post(
    "/match",
    response_model=MatchResponse,
    summary="Find External Candidates",
    description="Look up bibliographic candidates for each publication, rank them and auto-select confident matches.",
)
def match(
    payload: MatchRequest,
    search: SearchFn = Depends(get_candidate_search),
    settings: Settings = Depends(get_settings),
):
    publications = match_publications(
        payload.publications,
        search,
        margin=settings.auto_select_margin,
        source_name=settings.source_name,
        max_workers=settings.lookup_max_workers,
    )
    errors = {p.id: p.match.error for p in publications if p.match is not None and p.match.error}
    return MatchResponse(publications=publications, errors=errors)


@router.post("/match/select", response_model=PublicationRecord, summary="Select Candidate Manually")
def select(payload: SelectRequest):
    record = payload.publication
    if record.match is None:
        raise HTTPException(status_code=404, detail="Publication has no candidates to select from.")
    try:
        state = select_candidate(record.match, payload.candidate_id)
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return record.model_copy(update={"match": state})
