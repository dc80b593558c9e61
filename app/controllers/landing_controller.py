from fastapi import APIRouter, Query
from typing import Optional
from app.schemas.landing import LandingPageResponse, SearchSuggestionsResponse
from app.services.landing_service import get_landing_page_data, get_search_suggestions
from app.services.property_service import build_property_filters
from app.utils.http_errors import service_errors

router = APIRouter(prefix="/api/landing", tags=["Landing"])


@router.get("", response_model=LandingPageResponse)
async def landing_page(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    listing_type: Optional[str] = Query(None, alias="listingType"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    city: Optional[str] = None,
    state: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    amenities: Optional[str] = None,
    search: Optional[str] = None,
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
):
    """AVAILABLE listings, featured listings and platform metrics for the home page"""
    with service_errors():
        conditions = build_property_filters(
            listing_type=listing_type,
            property_type=property_type,
            city=city,
            state=state,
            min_price=min_price,
            max_price=max_price,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            amenities=amenities,
            search=search,
            is_featured=is_featured,
        )
        data = await get_landing_page_data(conditions, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return LandingPageResponse(data=data)


@router.get("/search-suggestions", response_model=SearchSuggestionsResponse)
async def search_suggestions(query: str = "", suggestion_type: str = Query("all", alias="type")):
    with service_errors():
        suggestions = await get_search_suggestions(query, suggestion_type)
    return SearchSuggestionsResponse(data=suggestions)
