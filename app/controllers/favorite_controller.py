from fastapi import APIRouter, Depends, status, Query
from app.schemas.common import MessageResponse
from app.schemas.favorite import (
    FavoriteRequest,
    FavoriteEnvelope,
    PaginatedFavoritesResponse,
    FavoriteStatusResponse,
)
from app.services.favorite_service import add_favorite, remove_favorite, get_user_favorites, get_favorite_status
from app.utils.dependencies import get_current_user
from app.utils.http_errors import service_errors, not_found

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.post("", response_model=FavoriteEnvelope, status_code=status.HTTP_201_CREATED)
async def add_to_favorites(request: FavoriteRequest, current_user: dict = Depends(get_current_user)):
    with service_errors():
        favorite = await add_favorite(current_user["id"], request.property_id)
    if not favorite:
        raise not_found("Property")
    return FavoriteEnvelope(message="Property added to favorites", data=favorite)


@router.delete("/{property_id}", response_model=MessageResponse)
async def remove_from_favorites(property_id: str, current_user: dict = Depends(get_current_user)):
    removed = await remove_favorite(current_user["id"], property_id)
    if not removed:
        raise not_found("Favorite")
    return MessageResponse(message="Property removed from favorites")


@router.get("", response_model=PaginatedFavoritesResponse)
async def list_favorites(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    result = await get_user_favorites(current_user["id"], page=page, limit=limit)
    return PaginatedFavoritesResponse(data=result["items"], pagination=result["pagination"])


@router.get("/status/{property_id}", response_model=FavoriteStatusResponse)
async def favorite_status(property_id: str, current_user: dict = Depends(get_current_user)):
    """Whether the current user has favorited a property"""
    return FavoriteStatusResponse(data=await get_favorite_status(current_user["id"], property_id))
