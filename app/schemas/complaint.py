from typing import List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.person import PersonSummary


class ComplaintCreateRequest(CamelModel):
    property_id: str
    subject: str
    description: str


class ComplaintUpdateRequest(CamelModel):
    status: str
    resolution_notes: Optional[str] = None


class ComplaintProperty(CamelModel):
    id: str
    title: str


class ComplaintResponse(CamelModel):
    id: str
    client_id: str
    property_id: str
    subject: str
    description: str
    status: str
    resolution_notes: Optional[str] = None
    resolved_at: Optional[str] = None
    resolved_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    client: Optional[PersonSummary] = None
    property: Optional[ComplaintProperty] = None


class ComplaintEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: ComplaintResponse


class PaginatedComplaintsResponse(CamelModel):
    success: bool = True
    data: List[ComplaintResponse]
    pagination: PaginationMeta
