from fastapi import APIRouter, Depends, Response, status, Query
from app.schemas.common import MessageResponse
from app.schemas.rating import (
    RatingRequest,
    RatingEnvelope,
    PropertyRatingsResponse,
    PaginatedRatingsResponse,
)
from app.services.rating_service import add_or_update_rating, get_property_ratings, delete_rating, get_user_ratings
from app.utils.dependencies import get_current_user
from app.utils.http_errors import service_errors, not_found

router = APIRouter(prefix="/api/ratings", tags=["Ratings"])


@router.post("", response_model=RatingEnvelope, status_code=status.HTTP_201_CREATED)
async def rate_property(
    request: RatingRequest,
    response: Response,
    current_user: dict = Depends(get_current_user),
):
    """Rate a property; rating it again updates the existing rating"""
    with service_errors():
        result = await add_or_update_rating(
            client_id=current_user["id"],
            property_id=request.property_id,
            rating=request.rating,
            comment=request.comment,
        )
    if result is None:
        raise not_found("Property")

    rating, created = result
    if not created:
        response.status_code = status.HTTP_200_OK
    return RatingEnvelope(
        message="Rating added successfully" if created else "Rating updated successfully",
        data=rating,
    )


@router.get("/user", response_model=PaginatedRatingsResponse)
async def my_ratings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    result = await get_user_ratings(current_user["id"], page=page, limit=limit)
    return PaginatedRatingsResponse(data=result["items"], pagination=result["pagination"])


@router.get("/property/{property_id}", response_model=PropertyRatingsResponse)
async def property_ratings(
    property_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    result = await get_property_ratings(property_id, page=page, limit=limit)
    if result is None:
        raise not_found("Property")
    return PropertyRatingsResponse(
        data=result["items"],
        summary=result["summary"],
        pagination=result["pagination"],
    )


@router.delete("/{rating_id}", response_model=MessageResponse)
async def remove_rating(rating_id: str, current_user: dict = Depends(get_current_user)):
    with service_errors():
        deleted = await delete_rating(rating_id, current_user)
    if not deleted:
        raise not_found("Rating")
    return MessageResponse(message="Rating deleted successfully")
