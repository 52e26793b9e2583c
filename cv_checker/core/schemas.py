from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Literal, Optional


PublicationType = Literal["journal", "poster", "oral", "other"]
AuthorshipState = Literal["match", "mismatch", "unknown"]
OverallStatus = Literal["good", "warning", "bad"]


def new_id() -> str:
    return uuid4().hex


class ExternalCandidate(BaseModel):
    """A bibliographic entry returned by the retrieval collaborator, scored against one record."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    external_id: Optional[str] = Field(default=None, description="Stable external identifier, e.g. a DOI")
    title: str = ""
    authors: List[str] = Field(default_factory=list)
    venue: Optional[str] = None
    year: Optional[int] = None
    score: float = Field(..., ge=0.0, le=1.0, description="Composite score against the parsed record")
    source_name: str = "Crossref"


class MatchState(BaseModel):
    candidates: List[ExternalCandidate] = Field(default_factory=list, description="Descending by score")
    selected_id: Optional[str] = Field(default=None, description="Id of one of the candidates")
    auto_selected: bool = False
    error: Optional[str] = Field(default=None, description="Lookup failure for this record, if any")

    @model_validator(mode="after")
    def _selected_id_is_a_candidate(self) -> "MatchState":
        if self.selected_id is not None and not any(c.id == self.selected_id for c in self.candidates):
            raise ValueError(f"selected_id {self.selected_id!r} does not reference a candidate")
        return self

    def selected(self) -> Optional[ExternalCandidate]:
        if self.selected_id is None:
            return None
        for candidate in self.candidates:
            if candidate.id == self.selected_id:
                return candidate
        return None


class PublicationRecord(BaseModel):
    id: str = Field(default_factory=new_id, frozen=True)
    raw_text: str = Field(default="", frozen=True, description="Fragment the record was parsed from")
    section: str = "Publications"
    type: PublicationType = "other"
    title: str = ""
    authors: List[str] = Field(default_factory=list, description="Author names in CV order")
    venue: str = ""
    year: Optional[int] = None
    status: Optional[str] = Field(default=None, description="Publication status annotation, e.g. 'Published'")
    match: Optional[MatchState] = None


class VerificationVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    authorship: AuthorshipState
    position: AuthorshipState
    status: OverallStatus
    explanation: str


class OwnerProfile(BaseModel):
    """The CV owner's name as written, plus alternate renderings (maiden name, initials-only, ...)."""
    full_name: str = Field(..., min_length=1)
    variants: List[str] = Field(default_factory=list)


# ----- API payloads -----

class ParseTextRequest(BaseModel):
    text: str = ""


class ParseResponse(BaseModel):
    publications: List[PublicationRecord]
    warnings: List[str] = Field(default_factory=list)


class MatchRequest(BaseModel):
    publications: List[PublicationRecord]


class MatchResponse(BaseModel):
    publications: List[PublicationRecord]
    errors: Dict[str, str] = Field(default_factory=dict, description="Lookup failures keyed by publication id")


class SelectRequest(BaseModel):
    publication: PublicationRecord
    candidate_id: str


class VerifyRequest(BaseModel):
    publications: List[PublicationRecord]
    policy: Optional[Literal["alignment", "owner_position"]] = None
    owner: Optional[OwnerProfile] = None


class VerificationResult(BaseModel):
    publication_id: str
    verdict: Optional[VerificationVerdict] = None


class VerificationSummary(BaseModel):
    good: int = 0
    warning: int = 0
    bad: int = 0
    unmatched: int = 0
    total: int = 0


class VerifyResponse(BaseModel):
    results: List[VerificationResult]
    summary: VerificationSummary


class ReportRequest(BaseModel):
    publications: List[PublicationRecord]
    policy: Optional[Literal["alignment", "owner_position"]] = None
    owner: Optional[OwnerProfile] = None
