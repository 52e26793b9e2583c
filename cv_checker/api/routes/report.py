from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response

from cv_checker.core.exporters import export_csv, export_html
from cv_checker.core.pipeline import verify_publications
from cv_checker.core.schemas import ReportRequest
from cv_checker.settings import Settings, get_settings

router = APIRouter(tags=["report"])


@router.post("/report", summary="Export Verification Report")
def report(
    payload: ReportRequest,
    format: Literal["csv", "html"] = "csv",
    settings: Settings = Depends(get_settings),
):
    policy = payload.policy or settings.verification_policy
    if policy == "owner_position" and payload.owner is None:
        raise HTTPException(status_code=422, detail="The owner_position policy needs an owner profile.")

    rows = verify_publications(payload.publications, policy=policy, owner=payload.owner)
    if format == "html":
        return Response(
            content=export_html(rows),
            media_type="text/html",
            headers={"Content-Disposition": 'attachment; filename="cv-checker-report.html"'},
        )
    return Response(
        content=export_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="cv-checker-report.csv"'},
    )
