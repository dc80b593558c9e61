from typing import Dict, List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.person import PersonSummary


class RatingRequest(CamelModel):
    property_id: str
    rating: int
    comment: Optional[str] = None


class RatedProperty(CamelModel):
    id: str
    title: str
    city: str
    image_urls: List[str] = []


class RatingResponse(CamelModel):
    id: str
    property_id: str
    client_id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    client: Optional[PersonSummary] = None
    property: Optional[RatedProperty] = None


class RatingSummary(CamelModel):
    average_rating: float
    total_ratings: int
    distribution: Dict[str, int]


class RatingEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: RatingResponse


class PropertyRatingsResponse(CamelModel):
    success: bool = True
    data: List[RatingResponse]
    summary: RatingSummary
    pagination: PaginationMeta


class PaginatedRatingsResponse(CamelModel):
    success: bool = True
    data: List[RatingResponse]
    pagination: PaginationMeta
