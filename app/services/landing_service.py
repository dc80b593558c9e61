from typing import List
import asyncio
import logging
from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import User, Property, PropertyView
from app.models.enums import PropertyStatus, UserRole
from app.services.property_service import list_properties, PROPERTY_SORT_FIELDS
from app.services.query_helpers import property_engagement_columns, counts_from_row, PROPERTY_COUNT_LABELS
from app.services.serializers import property_to_dict
from app.utils.coercion import to_int, to_money, to_iso
from app.utils.pagination import resolve_sort

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6
TOP_CITIES_LIMIT = 5
RECENT_LISTINGS_LIMIT = 5
MAX_SUGGESTIONS = 10
SUGGESTION_TYPES = ("all", "location", "property")

EMPTY_METRICS = {
    "total_properties": 0,
    "available_properties": 0,
    "featured_properties": 0,
    "total_users": 0,
    "total_landlords": 0,
    "total_agents": 0,
    "total_views": 0,
    "average_price": 0.0,
    "top_cities": [],
    "recent_activity": [],
}


async def _scalar(stmt):
    async with AsyncSessionLocal() as session:
        return (await session.execute(stmt)).scalar()


async def _featured_properties() -> List[dict]:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property, *property_engagement_columns())
            .where(Property.is_featured.is_(True), Property.status == PropertyStatus.AVAILABLE)
            .options(selectinload(Property.posted_by), selectinload(Property.managed_by_agent))
            .order_by(Property.created_at.desc())
            .limit(FEATURED_LIMIT)
        )
        rows = (await session.execute(stmt)).all()
        return [
            property_to_dict(row[0], counts_from_row(row, PROPERTY_COUNT_LABELS), include_people=True)
            for row in rows
        ]


async def _top_cities() -> List[dict]:
    async with AsyncSessionLocal() as session:
        count = func.count(Property.id)
        stmt = (
            select(Property.city, count.label("count"))
            .group_by(Property.city)
            .order_by(count.desc(), Property.city)
            .limit(TOP_CITIES_LIMIT)
        )
        return [{"city": city, "count": to_int(n)} for city, n in (await session.execute(stmt)).all()]


async def _recent_listings() -> List[dict]:
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property)
            .options(selectinload(Property.posted_by))
            .order_by(Property.created_at.desc())
            .limit(RECENT_LISTINGS_LIMIT)
        )
        props = (await session.execute(stmt)).scalars().all()
        return [
            {
                "id": p.id,
                "title": p.title,
                "city": p.city,
                "price": to_money(p.price),
                "created_at": to_iso(p.created_at),
                "posted_by": {
                    "first_name": p.posted_by.first_name,
                    "last_name": p.posted_by.last_name,
                } if p.posted_by else None,
            }
            for p in props
        ]


async def get_platform_metrics() -> dict:
    """Headline numbers for the landing page; zeros when anything fails"""
    results = await asyncio.gather(
        _scalar(select(func.count(Property.id))),
        _scalar(select(func.count(Property.id)).where(Property.status == PropertyStatus.AVAILABLE)),
        _scalar(select(func.count(Property.id)).where(Property.is_featured.is_(True))),
        _scalar(select(func.count(User.id))),
        _scalar(select(func.count(User.id)).where(User.role == UserRole.LANDLORD)),
        _scalar(select(func.count(User.id)).where(User.role == UserRole.AGENT)),
        _scalar(select(func.count(PropertyView.id))),
        _scalar(select(func.avg(Property.price)).where(Property.status == PropertyStatus.AVAILABLE)),
        _top_cities(),
        _recent_listings(),
        return_exceptions=True,
    )

    failure = next((r for r in results if isinstance(r, Exception)), None)
    if failure is not None:
        logger.error("Failed to compute landing page metrics", exc_info=failure)
        return {key: (list(value) if isinstance(value, list) else value) for key, value in EMPTY_METRICS.items()}

    (
        total_properties,
        available_properties,
        featured_properties,
        total_users,
        total_landlords,
        total_agents,
        total_views,
        average_price,
        top_cities,
        recent_activity,
    ) = results

    return {
        "total_properties": to_int(total_properties),
        "available_properties": to_int(available_properties),
        "featured_properties": to_int(featured_properties),
        "total_users": to_int(total_users),
        "total_landlords": to_int(total_landlords),
        "total_agents": to_int(total_agents),
        "total_views": to_int(total_views),
        "average_price": to_money(average_price),
        "top_cities": top_cities,
        "recent_activity": recent_activity,
    }


async def get_landing_page_data(
    conditions: list,
    page: int = 1,
    limit: int = 12,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    """AVAILABLE listings for the public filters plus featured listings and metrics"""
    # Reject a bad sort before any query starts
    resolve_sort(sort_by, sort_order, PROPERTY_SORT_FIELDS)

    tasks = [
        asyncio.ensure_future(
            list_properties(conditions, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
        ),
        asyncio.ensure_future(_featured_properties()),
        asyncio.ensure_future(get_platform_metrics()),
    ]
    try:
        listing, featured, metrics = await asyncio.gather(*tasks)
    except BaseException:
        # Siblings are cancelled and awaited so none outlives the request
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return {
        "properties": listing["items"],
        "featured_properties": featured,
        "metrics": metrics,
        "pagination": listing["pagination"],
    }


async def get_search_suggestions(query: str, suggestion_type: str = "all") -> List[dict]:
    """Autocomplete over locations and listing titles of AVAILABLE properties"""
    query = (query or "").strip()
    if len(query) < 2:
        return []
    if suggestion_type not in SUGGESTION_TYPES:
        raise ValueError(f"Invalid type '{suggestion_type}'. Allowed values: {', '.join(SUGGESTION_TYPES)}")

    pattern = f"%{query}%"
    suggestions = []

    async with AsyncSessionLocal() as session:
        if suggestion_type in ("all", "location"):
            stmt = (
                select(Property.city, Property.state)
                .where(
                    Property.status == PropertyStatus.AVAILABLE,
                    or_(Property.city.ilike(pattern), Property.state.ilike(pattern)),
                )
                .distinct()
                .order_by(Property.city, Property.state)
                .limit(5)
            )
            for city, state in (await session.execute(stmt)).all():
                label = f"{city}, {state}"
                suggestions.append({"type": "location", "value": label, "label": label})

        if suggestion_type in ("all", "property"):
            stmt = (
                select(Property.id, Property.title, Property.city)
                .where(Property.status == PropertyStatus.AVAILABLE, Property.title.ilike(pattern))
                .order_by(Property.created_at.desc())
                .limit(5)
            )
            for prop_id, title, city in (await session.execute(stmt)).all():
                suggestions.append({"type": "property", "value": prop_id, "label": title, "subtitle": city})

    return suggestions[:MAX_SUGGESTIONS]
