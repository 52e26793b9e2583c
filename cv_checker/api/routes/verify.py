from fastapi import APIRouter, Depends, HTTPException

from cv_checker.core.pipeline import summarize, verify_publications
from cv_checker.core.schemas import VerificationResult, VerifyRequest, VerifyResponse
from cv_checker.settings import Settings, get_settings

router = APIRouter(tags=["verify"])


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify Authorship",
    description="Compare each publication's CV author list with its selected candidate's authors.",
)
def verify(payload: VerifyRequest, settings: Settings = Depends(get_settings)):
    policy = payload.policy or settings.verification_policy
    if policy == "owner_position" and payload.owner is None:
        raise HTTPException(status_code=422, detail="The owner_position policy needs an owner profile.")

    rows = verify_publications(payload.publications, policy=policy, owner=payload.owner)
    results = [VerificationResult(publication_id=record.id, verdict=verdict) for record, verdict, _ in rows]
    return VerifyResponse(results=results, summary=summarize(verdict for _, verdict, _ in rows))
