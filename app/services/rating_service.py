from typing import Optional, Tuple
import logging
import uuid
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import Rating, Property
from app.models.enums import is_admin_role
from app.services.serializers import rating_to_dict
from app.utils.pagination import page_window, pagination_meta
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def _validate_stars(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValueError("Rating must be an integer between 1 and 5")
    return rating


async def add_or_update_rating(
    client_id: str,
    property_id: str,
    rating: int,
    comment: Optional[str] = None,
) -> Optional[Tuple[dict, bool]]:
    """
    Rate a property once per client; a second submission updates the first
    Returns (rating, created) or None when the property does not exist
    """
    _validate_stars(rating)

    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return None

        if prop.posted_by_id == client_id:
            raise PermissionError("You cannot rate your own property")

        stmt = select(Rating).where(Rating.client_id == client_id, Rating.property_id == property_id)
        existing = (await session.execute(stmt)).scalar_one_or_none()

        if existing:
            existing.rating = rating
            existing.comment = comment
            existing.updated_at = utcnow()
            record, created = existing, False
        else:
            record = Rating(
                id=str(uuid.uuid4()),
                client_id=client_id,
                property_id=property_id,
                rating=rating,
                comment=comment,
            )
            session.add(record)
            created = True

        await session.commit()
        logger.info(f"Rating {'created' if created else 'updated'} for property {property_id} by {client_id}")
        return rating_to_dict(record), created


async def get_property_ratings(property_id: str, page: int = 1, limit: int = 10) -> Optional[dict]:
    """Paginated ratings with an average/distribution summary over all of them"""
    offset, limit = page_window(page, limit)

    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return None

        dist_stmt = (
            select(Rating.rating, func.count(Rating.id))
            .where(Rating.property_id == property_id)
            .group_by(Rating.rating)
        )
        distribution = {star: 0 for star in range(1, 6)}
        for star, count in (await session.execute(dist_stmt)).all():
            if star in distribution:
                distribution[star] = int(count)

        total = sum(distribution.values())
        weighted = sum(star * count for star, count in distribution.items())

        stmt = (
            select(Rating)
            .where(Rating.property_id == property_id)
            .options(selectinload(Rating.client))
            .order_by(Rating.created_at.desc(), Rating.id)
            .offset(offset)
            .limit(limit)
        )
        ratings = (await session.execute(stmt)).scalars().all()

        return {
            "items": [rating_to_dict(r, include_client=True) for r in ratings],
            "summary": {
                "average_rating": round(weighted / total, 1) if total else 0.0,
                "total_ratings": total,
                "distribution": {str(star): count for star, count in distribution.items()},
            },
            "pagination": pagination_meta(total, page, limit),
        }


async def delete_rating(rating_id: str, user: dict) -> bool:
    """Author or admin"""
    async with AsyncSessionLocal() as session:
        record = await session.get(Rating, rating_id)
        if not record:
            return False

        if record.client_id != user["id"] and not is_admin_role(user["role"]):
            raise PermissionError("You can only delete your own ratings")

        await session.delete(record)
        await session.commit()
        return True


async def get_user_ratings(client_id: str, page: int = 1, limit: int = 10) -> dict:
    offset, limit = page_window(page, limit)

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(Rating.id)).where(Rating.client_id == client_id)
        )).scalar() or 0

        stmt = (
            select(Rating)
            .where(Rating.client_id == client_id)
            .options(selectinload(Rating.property))
            .order_by(Rating.created_at.desc(), Rating.id)
            .offset(offset)
            .limit(limit)
        )
        ratings = (await session.execute(stmt)).scalars().all()

        items = []
        for r in ratings:
            data = rating_to_dict(r)
            data["property"] = {
                "id": r.property.id,
                "title": r.property.title,
                "city": r.property.city,
                "image_urls": list(r.property.image_urls or []),
            }
            items.append(data)

        return {"items": items, "pagination": pagination_meta(total, page, limit)}
