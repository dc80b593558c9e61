"""
Property Controller - public search, listing detail and poster management
"""
from fastapi import APIRouter, Depends, Request, status, Query, Form, File, UploadFile
from starlette.concurrency import run_in_threadpool
from typing import List, Optional
from datetime import datetime
from app.schemas.common import MessageResponse
from app.schemas.property import (
    PropertyUpdateRequest,
    PropertyEnvelope,
    PropertyListEnvelope,
    PaginatedPropertiesResponse,
)
from app.models.enums import POSTER_ROLES
from app.services.cloudinary_service import upload_image_to_cloudinary
from app.services.property_service import (
    build_property_filters,
    list_properties,
    create_property,
    get_property_by_id,
    update_property,
    delete_property,
    get_similar_properties,
)
from app.utils.dependencies import get_current_user, get_current_user_optional, require_roles
from app.utils.http_errors import service_errors, not_found
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/properties", tags=["Properties"])


@router.get("", response_model=PaginatedPropertiesResponse)
async def search_properties(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
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
    user_id: Optional[str] = Query(None, alias="userId"),
):
    """
    Public listing search
    Only AVAILABLE listings unless userId selects one poster's listings
    """
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
            user_id=user_id,
        )
        result = await list_properties(conditions, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return PaginatedPropertiesResponse(data=result["items"], pagination=result["pagination"])


@router.post("", response_model=PropertyEnvelope, status_code=status.HTTP_201_CREATED)
async def create_property_endpoint(
    title: str = Form(...),
    description: str = Form(...),
    property_type: str = Form(..., alias="type"),
    listing_type: str = Form(..., alias="listingType"),
    price: float = Form(...),
    address: str = Form(...),
    city: str = Form(...),
    state: str = Form(...),
    currency: Optional[str] = Form(None),
    zip_code: Optional[str] = Form(None, alias="zipCode"),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    bedrooms: Optional[int] = Form(None),
    bathrooms: Optional[int] = Form(None),
    area: Optional[float] = Form(None),
    year_built: Optional[int] = Form(None, alias="yearBuilt"),
    amenities: Optional[List[str]] = Form(None),
    image_urls: Optional[List[str]] = Form(None, alias="imageUrls"),
    video_urls: Optional[List[str]] = Form(None, alias="videoUrls"),
    is_featured: bool = Form(False, alias="isFeatured"),
    available_from: Optional[datetime] = Form(None, alias="availableFrom"),
    managed_by_agent_id: Optional[str] = Form(None, alias="managedByAgentId"),
    images: Optional[List[UploadFile]] = File(None),
    current_user: dict = Depends(require_roles(*POSTER_ROLES)),
):
    """
    Create a listing (multipart form)
    Uploaded images go to Cloudinary; only the returned URLs are stored
    """
    urls = [u for u in (image_urls or []) if u]

    with service_errors():
        for image in images or []:
            content = await image.read()
            if not content:
                continue
            urls.append(await run_in_threadpool(upload_image_to_cloudinary, content, image.filename))

        prop = await create_property(
            poster=current_user,
            data={
                "title": title,
                "description": description,
                "type": property_type,
                "listing_type": listing_type,
                "price": price,
                "currency": currency,
                "address": address,
                "city": city,
                "state": state,
                "zip_code": zip_code,
                "latitude": latitude,
                "longitude": longitude,
                "bedrooms": bedrooms,
                "bathrooms": bathrooms,
                "area": area,
                "year_built": year_built,
                "amenities": amenities,
                "video_urls": video_urls,
                "is_featured": is_featured,
                "available_from": available_from,
                "managed_by_agent_id": managed_by_agent_id,
            },
            image_urls=urls,
        )
    return PropertyEnvelope(message="Property created successfully", data=prop)


@router.get("/{property_id}", response_model=PropertyEnvelope)
async def get_property(
    property_id: str,
    request: Request,
    track_view: bool = Query(True, alias="trackView"),
    current_user: Optional[dict] = Depends(get_current_user_optional),
):
    """Listing detail; records a (deduplicated) view unless trackView=false"""
    prop = await get_property_by_id(
        property_id,
        viewer_id=current_user["id"] if current_user else None,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        track_view=track_view,
    )
    if not prop:
        raise not_found("Property")
    return PropertyEnvelope(data=prop)


@router.put("/{property_id}", response_model=PropertyEnvelope)
async def update_property_endpoint(
    property_id: str,
    request: PropertyUpdateRequest,
    current_user: dict = Depends(get_current_user),
):
    """Update a listing (poster, managing agent or admin)"""
    update_data = request.model_dump(exclude_unset=True)
    with service_errors():
        prop = await update_property(property_id, current_user, update_data)
    if not prop:
        raise not_found("Property")
    return PropertyEnvelope(message="Property updated successfully", data=prop)


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property_endpoint(property_id: str, current_user: dict = Depends(get_current_user)):
    """Delete a listing (poster or admin)"""
    with service_errors():
        deleted = await delete_property(property_id, current_user)
    if not deleted:
        raise not_found("Property")
    return MessageResponse(message="Property deleted successfully")


@router.get("/{property_id}/similar", response_model=PropertyListEnvelope)
async def similar_properties(property_id: str, limit: int = Query(4, ge=1, le=20)):
    props = await get_similar_properties(property_id, limit=limit)
    if props is None:
        raise not_found("Property")
    return PropertyListEnvelope(data=props)
