from typing import List, Optional
from datetime import datetime
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.person import PersonSummary
from app.schemas.rating import RatingResponse


class PropertyCounts(CamelModel):
    views: int = 0
    favorites: int = 0
    ratings: int = 0
    complaints: int = 0


class PropertyUpdateRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    listing_type: Optional[str] = None
    status: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    year_built: Optional[int] = None
    image_urls: Optional[List[str]] = None
    video_urls: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    available_from: Optional[datetime] = None
    managed_by_agent_id: Optional[str] = None


class PropertyResponse(CamelModel):
    id: str
    title: str
    description: str
    type: str
    listing_type: str
    status: str
    price: float
    currency: str
    address: str
    city: str
    state: str
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    year_built: Optional[int] = None
    image_urls: List[str] = []
    video_urls: List[str] = []
    amenities: List[str] = []
    is_featured: bool
    available_from: Optional[str] = None
    posted_by_id: str
    managed_by_agent_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    posted_by: Optional[PersonSummary] = None
    managed_by_agent: Optional[PersonSummary] = None
    counts: Optional[PropertyCounts] = None


class PropertyDetailResponse(PropertyResponse):
    ratings: List[RatingResponse] = []
    average_rating: float = 0.0
    total_ratings: int = 0


class PropertyEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: PropertyDetailResponse


class PropertyListEnvelope(CamelModel):
    success: bool = True
    data: List[PropertyResponse]


class PaginatedPropertiesResponse(CamelModel):
    success: bool = True
    data: List[PropertyResponse]
    pagination: PaginationMeta
