from typing import List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.property import PropertyResponse


class CityCount(CamelModel):
    city: str
    count: int


class ListingPoster(CamelModel):
    first_name: str
    last_name: str


class RecentListing(CamelModel):
    id: str
    title: str
    city: str
    price: float
    created_at: Optional[str] = None
    posted_by: Optional[ListingPoster] = None


class PlatformMetrics(CamelModel):
    total_properties: int
    available_properties: int
    featured_properties: int
    total_users: int
    total_landlords: int
    total_agents: int
    total_views: int
    average_price: float
    top_cities: List[CityCount]
    recent_activity: List[RecentListing]


class LandingPageData(CamelModel):
    properties: List[PropertyResponse]
    featured_properties: List[PropertyResponse]
    metrics: PlatformMetrics
    pagination: PaginationMeta


class LandingPageResponse(CamelModel):
    success: bool = True
    data: LandingPageData


class SearchSuggestion(CamelModel):
    type: str
    value: str
    label: str
    subtitle: Optional[str] = None


class SearchSuggestionsResponse(CamelModel):
    success: bool = True
    data: List[SearchSuggestion]
