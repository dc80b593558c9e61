from typing import List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.person import PersonSummary


class VerificationSubmitRequest(CamelModel):
    document_url: str


class VerificationReviewRequest(CamelModel):
    status: str
    status_reason: Optional[str] = None


class VerificationUser(PersonSummary):
    email: Optional[str] = None


class VerificationResponse(CamelModel):
    id: str
    user_id: str
    status: str
    document_url: Optional[str] = None
    status_reason: Optional[str] = None
    submitted_at: Optional[str] = None
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    user: Optional[VerificationUser] = None


class VerificationEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: VerificationResponse


class PaginatedVerificationsResponse(CamelModel):
    success: bool = True
    data: List[VerificationResponse]
    pagination: PaginationMeta
