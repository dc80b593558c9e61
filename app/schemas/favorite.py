from typing import List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.property import PropertyResponse


class FavoriteRequest(CamelModel):
    property_id: str


class FavoriteResponse(CamelModel):
    id: str
    property_id: str
    user_id: str
    created_at: Optional[str] = None


class FavoriteProperty(PropertyResponse):
    average_rating: float = 0.0
    total_ratings: int = 0


class FavoriteListItem(CamelModel):
    id: str
    created_at: Optional[str] = None
    property: FavoriteProperty


class FavoriteEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: FavoriteResponse


class PaginatedFavoritesResponse(CamelModel):
    success: bool = True
    data: List[FavoriteListItem]
    pagination: PaginationMeta


class FavoriteStatus(CamelModel):
    is_favorited: bool
    favorite_id: Optional[str] = None


class FavoriteStatusResponse(CamelModel):
    success: bool = True
    data: FavoriteStatus
