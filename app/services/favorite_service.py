from typing import Optional
import logging
import uuid
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import Favorite, Property, Rating
from app.services.errors import ConflictError
from app.services.serializers import property_to_dict, average_rating
from app.utils.coercion import to_iso
from app.utils.pagination import page_window, pagination_meta

logger = logging.getLogger(__name__)


async def add_favorite(user_id: str, property_id: str) -> Optional[dict]:
    """Returns None when the property does not exist"""
    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return None

        stmt = select(Favorite.id).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
        if (await session.execute(stmt)).first():
            raise ConflictError("Property is already in favorites")

        favorite = Favorite(id=str(uuid.uuid4()), user_id=user_id, property_id=property_id)
        session.add(favorite)
        await session.commit()

        return {
            "id": favorite.id,
            "property_id": property_id,
            "user_id": user_id,
            "created_at": to_iso(favorite.created_at),
        }


async def remove_favorite(user_id: str, property_id: str) -> bool:
    async with AsyncSessionLocal() as session:
        stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
        favorite = (await session.execute(stmt)).scalar_one_or_none()
        if not favorite:
            return False

        await session.delete(favorite)
        await session.commit()
        return True


async def get_user_favorites(user_id: str, page: int = 1, limit: int = 10) -> dict:
    """Favorites, newest first, each with its property and rating summary"""
    offset, limit = page_window(page, limit)

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(Favorite.id)).where(Favorite.user_id == user_id)
        )).scalar() or 0

        stmt = (
            select(Favorite)
            .where(Favorite.user_id == user_id)
            .options(
                selectinload(Favorite.property).selectinload(Property.posted_by),
                selectinload(Favorite.property).selectinload(Property.managed_by_agent),
                selectinload(Favorite.property).selectinload(Property.ratings),
            )
            .order_by(Favorite.created_at.desc(), Favorite.id)
            .offset(offset)
            .limit(limit)
        )
        favorites = (await session.execute(stmt)).scalars().all()

        items = []
        for favorite in favorites:
            prop = favorite.property
            prop_data = property_to_dict(prop, include_people=True)
            prop_data["average_rating"] = average_rating(r.rating for r in prop.ratings)
            prop_data["total_ratings"] = len(prop.ratings)
            items.append({
                "id": favorite.id,
                "created_at": to_iso(favorite.created_at),
                "property": prop_data,
            })

        return {"items": items, "pagination": pagination_meta(total, page, limit)}


async def get_favorite_status(user_id: str, property_id: str) -> dict:
    async with AsyncSessionLocal() as session:
        stmt = select(Favorite.id).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
        favorite_id = (await session.execute(stmt)).scalar_one_or_none()
        return {"is_favorited": favorite_id is not None, "favorite_id": favorite_id}
