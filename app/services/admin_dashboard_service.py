"""
Admin dashboard statistics.

The snapshot is built in two phases:

1. Fan-out: independent read queries run concurrently, each in its own
   session (an AsyncSession must not be shared between concurrent tasks).
   Every query goes through ``isolate`` so a failing query contributes its
   default (empty list, zero, or None for the average price) instead of
   failing the whole dashboard.
2. Reshaping: ``build_dashboard_snapshot`` turns the raw results into the
   response structure. It is a pure function; if it raises, the endpoint
   answers 500.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type
from collections import Counter
from datetime import datetime, timedelta
import asyncio
import copy
import enum
import logging
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from app.config import settings
from app.database.connection import AsyncSessionLocal
from app.models import User, UserVerification, Property, Rating, Favorite, Complaint, PropertyView
from app.models.enums import (
    UserRole,
    VerificationStatus,
    PropertyStatus,
    PropertyType,
    ListingType,
    ComplaintStatus,
)
from app.services.query_helpers import (
    property_engagement_columns,
    user_engagement_columns,
    counts_from_row,
    PROPERTY_COUNT_LABELS,
    USER_COUNT_LABELS,
)
from app.utils.coercion import to_int, to_money, to_iso, utc_date_key, enum_value
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 5
RECENT_PROPERTIES_LIMIT = 5
TOP_PROPERTIES_LIMIT = 10
ENGAGEMENT_ROLES = (UserRole.CLIENT, UserRole.LANDLORD, UserRole.AGENT)


async def isolate(name: str, coro, default):
    """Await a sub-query, falling back to a copy of ``default`` if it raises"""
    try:
        return await coro
    except Exception:
        logger.warning(f"Dashboard sub-query '{name}' failed, using default", exc_info=True)
        return copy.deepcopy(default)


# Sub-queries

async def _grouped_counts(column) -> List[Tuple[Any, int]]:
    async with AsyncSessionLocal() as session:
        stmt = select(column, func.count()).group_by(column)
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]


async def _count(stmt) -> int:
    async with AsyncSessionLocal() as session:
        return (await session.execute(stmt)).scalar()


async def count_users_by_role():
    return await _grouped_counts(User.role)


async def count_users_by_verification_status():
    return await _grouped_counts(User.verification_status)


async def count_properties_by_status():
    return await _grouped_counts(Property.status)


async def count_properties_by_type():
    return await _grouped_counts(Property.type)


async def count_properties_by_listing_type():
    return await _grouped_counts(Property.listing_type)


async def count_pending_verifications():
    return await _count(
        select(func.count(UserVerification.id)).where(UserVerification.status == VerificationStatus.PENDING)
    )


async def count_pending_complaints():
    return await _count(
        select(func.count(Complaint.id)).where(Complaint.status == ComplaintStatus.PENDING)
    )


async def count_ratings():
    return await _count(select(func.count(Rating.id)))


async def count_favorites():
    return await _count(select(func.count(Favorite.id)))


async def count_views():
    return await _count(select(func.count(PropertyView.id)))


async def count_users_since(since: datetime):
    return await _count(select(func.count(User.id)).where(User.created_at >= since))


async def fetch_recent_users():
    async with AsyncSessionLocal() as session:
        stmt = select(User).order_by(User.created_at.desc()).limit(RECENT_USERS_LIMIT)
        return list((await session.execute(stmt)).scalars().all())


async def fetch_average_price():
    async with AsyncSessionLocal() as session:
        return (await session.execute(select(func.avg(Property.price)))).scalar()


async def fetch_user_creation_times(since: datetime):
    async with AsyncSessionLocal() as session:
        stmt = select(User.created_at).where(User.created_at >= since)
        return list((await session.execute(stmt)).scalars().all())


async def fetch_property_creation_times(since: datetime):
    async with AsyncSessionLocal() as session:
        stmt = select(Property.created_at).where(Property.created_at >= since)
        return list((await session.execute(stmt)).scalars().all())


async def fetch_user_engagement():
    """(id, role, last_login) plus activity counts for non-admin users"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User.id, User.role, User.last_login, *user_engagement_columns())
            .where(User.role.in_(ENGAGEMENT_ROLES))
            .order_by(User.created_at.desc())
        )
        rows = (await session.execute(stmt)).all()
        return [
            {
                "id": row.id,
                "role": row.role,
                "last_login": row.last_login,
                "counts": counts_from_row(row, USER_COUNT_LABELS),
            }
            for row in rows
        ]


async def fetch_property_table():
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property, *property_engagement_columns())
            .options(selectinload(Property.posted_by), selectinload(Property.managed_by_agent))
            .order_by(Property.created_at.desc())
        )
        rows = (await session.execute(stmt)).all()
        return [(row[0], counts_from_row(row, PROPERTY_COUNT_LABELS)) for row in rows]


async def fetch_top_properties():
    async with AsyncSessionLocal() as session:
        stmt = (
            select(Property, *property_engagement_columns())
            .options(selectinload(Property.posted_by))
            .order_by(Property.created_at.desc())
            .limit(TOP_PROPERTIES_LIMIT)
        )
        rows = (await session.execute(stmt)).all()
        return [(row[0], counts_from_row(row, PROPERTY_COUNT_LABELS)) for row in rows]


async def fetch_user_table():
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User, *user_engagement_columns())
            .options(selectinload(User.verification_info), selectinload(User.agent_profile))
            .order_by(User.created_at.desc())
        )
        rows = (await session.execute(stmt)).all()
        return [(row[0], counts_from_row(row, USER_COUNT_LABELS)) for row in rows]


# Reshaping (pure)

def complete_enum_counts(rows: Optional[Iterable], enum_cls: Type[enum.Enum]) -> Dict[str, int]:
    """Zero-filled {member value: count}; keys outside the enum are dropped"""
    counts = {member.value: 0 for member in enum_cls}
    for key, count in rows or []:
        key = enum_value(key)
        if key in counts:
            counts[key] = to_int(count)
    return counts


def build_trend(timestamps: Optional[Iterable[datetime]]) -> List[dict]:
    """Per-UTC-day counts, ascending by date"""
    buckets = Counter(utc_date_key(ts) for ts in timestamps or [] if ts is not None)
    return [{"date": day, "count": buckets[day]} for day in sorted(buckets)]


def display_name(first: Optional[str], last: Optional[str]) -> str:
    name = " ".join(part.strip() for part in (first, last) if part and part.strip())
    return name or "N/A"


def _person_name(user) -> str:
    if user is None:
        return "N/A"
    return display_name(user.first_name, user.last_name)


def _location(prop) -> str:
    return f"{prop.city}, {prop.state}"


def project_user_row(user, counts: dict) -> dict:
    profile = user.agent_profile
    return {
        "id": user.id,
        "name": display_name(user.first_name, user.last_name),
        "email": user.email or "N/A",
        "phone": user.phone,
        "role": enum_value(user.role),
        "verification_status": enum_value(user.verification_status),
        "is_email_verified": bool(user.is_email_verified),
        "last_login": to_iso(user.last_login),
        "join_date": to_iso(user.created_at),
        "properties_count": to_int(counts.get("properties_posted")),
        "reviews_count": to_int(counts.get("ratings")),
        "favorites_count": to_int(counts.get("favorites")),
        "complaints_count": to_int(counts.get("complaints")),
        "avatar": user.avatar_url,
        "experience": profile.experience if profile else None,
        "specialties": list(profile.specialties or []) if profile else [],
    }


def project_property_row(prop, counts: dict) -> dict:
    return {
        "id": prop.id,
        "title": prop.title,
        "type": enum_value(prop.type),
        "listing_type": enum_value(prop.listing_type),
        "status": enum_value(prop.status),
        "price": to_money(prop.price),
        "currency": prop.currency,
        "location": _location(prop),
        "address": prop.address,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "area": prop.area,
        "year_built": prop.year_built,
        "image_urls": list(prop.image_urls or []),
        "video_urls": list(prop.video_urls or []),
        "amenities": list(prop.amenities or []),
        "posted_by": _person_name(prop.posted_by),
        "posted_by_id": prop.posted_by.id if prop.posted_by else None,
        "managed_by": _person_name(prop.managed_by_agent),
        "managed_by_id": prop.managed_by_agent.id if prop.managed_by_agent else None,
        "created_at": to_iso(prop.created_at),
        "updated_at": to_iso(prop.updated_at),
        "available_from": to_iso(prop.available_from),
        "views": to_int(counts.get("views")),
        "favorites": to_int(counts.get("favorites")),
        "ratings": to_int(counts.get("ratings")),
        "complaints": to_int(counts.get("complaints")),
        "is_featured": bool(prop.is_featured),
    }


def project_top_property(prop, counts: dict) -> dict:
    poster = prop.posted_by
    return {
        "id": prop.id,
        "title": prop.title,
        "type": enum_value(prop.type),
        "listing_type": enum_value(prop.listing_type),
        "price": to_money(prop.price),
        "currency": prop.currency,
        "location": _location(prop),
        "posted_by": _person_name(poster),
        "posted_by_email": poster.email if poster else None,
        "posted_by_phone": poster.phone if poster else None,
        "views": to_int(counts.get("views")),
        "favorites": to_int(counts.get("favorites")),
        "ratings": to_int(counts.get("ratings")),
        "created_at": to_iso(prop.created_at),
        "is_featured": bool(prop.is_featured),
    }


def project_recent_user(user) -> dict:
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "role": enum_value(user.role),
        "verification_status": enum_value(user.verification_status),
        "created_at": to_iso(user.created_at),
        "last_login": to_iso(user.last_login),
    }


def project_engagement(entry: dict) -> dict:
    counts = entry.get("counts") or {}
    return {
        "user_id": entry["id"],
        "role": enum_value(entry["role"]),
        "last_active": to_iso(entry.get("last_login")),
        "properties_posted": to_int(counts.get("properties_posted")),
        "reviews_given": to_int(counts.get("ratings")),
        "favorites_added": to_int(counts.get("favorites")),
        "complaints_filed": to_int(counts.get("complaints")),
    }


def build_dashboard_snapshot(results: Dict[str, Any]) -> dict:
    """Assemble the dashboard from the fan-out results (keyed by sub-query name)"""
    by_role = complete_enum_counts(results["users_by_role"], UserRole)
    by_verification = complete_enum_counts(results["users_by_verification_status"], VerificationStatus)
    by_status = complete_enum_counts(results["properties_by_status"], PropertyStatus)
    by_type = complete_enum_counts(results["properties_by_type"], PropertyType)
    by_listing_type = complete_enum_counts(results["properties_by_listing_type"], ListingType)

    # Totals are sums over the zero-filled breakdowns
    total_users = sum(by_role.values())
    total_non_admin_users = total_users - by_role[UserRole.ADMIN.value]
    total_properties = sum(by_status.values())

    registration_trends = build_trend(results["user_creation_times"])
    creation_trends = build_trend(results["property_creation_times"])
    engagement = [project_engagement(entry) for entry in results["user_engagement"] or []]
    property_table = [project_property_row(prop, counts) for prop, counts in results["property_table"] or []]
    user_table = [project_user_row(user, counts) for user, counts in results["user_table"] or []]
    top_properties = [project_top_property(prop, counts) for prop, counts in results["top_properties"] or []]

    return {
        "user_metrics": {
            "total_users": total_users,
            "total_non_admin_users": total_non_admin_users,
            "by_role": by_role,
            "by_verification_status": by_verification,
            "new_last_30_days": to_int(results["new_users"]),
            "user_table_data": user_table,
            "registration_trends": registration_trends,
            "engagement_analytics": engagement,
        },
        "property_metrics": {
            "total_properties": total_properties,
            "by_status": by_status,
            "by_type": by_type,
            "by_listing_type": by_listing_type,
            "average_price": to_money(results["average_price"]),
            "property_table_data": property_table,
            "creation_trends": creation_trends,
            "top_performing": top_properties,
        },
        "system_health": {
            "pending_verifications": to_int(results["pending_verifications"]),
            "pending_complaints": to_int(results["pending_complaints"]),
        },
        "engagement": {
            "total_ratings": to_int(results["total_ratings"]),
            "total_favorites": to_int(results["total_favorites"]),
            "total_views": to_int(results["total_views"]),
        },
        "recent_activity": {
            "recent_users": [project_recent_user(user) for user in results["recent_users"] or []],
            "recent_properties": property_table[:RECENT_PROPERTIES_LIMIT],
        },
        "analytics": {
            "user_growth": list(registration_trends),
            "property_growth": list(creation_trends),
            "user_engagement": list(engagement),
            "top_properties": list(top_properties),
        },
    }


async def get_admin_dashboard_stats() -> dict:
    """Point-in-time platform snapshot for the admin dashboard"""
    since = utcnow() - timedelta(days=settings.DASHBOARD_LOOKBACK_DAYS)

    fan_out = {
        "users_by_role": (count_users_by_role(), []),
        "users_by_verification_status": (count_users_by_verification_status(), []),
        "properties_by_status": (count_properties_by_status(), []),
        "properties_by_type": (count_properties_by_type(), []),
        "properties_by_listing_type": (count_properties_by_listing_type(), []),
        "pending_verifications": (count_pending_verifications(), 0),
        "pending_complaints": (count_pending_complaints(), 0),
        "total_ratings": (count_ratings(), 0),
        "total_favorites": (count_favorites(), 0),
        "total_views": (count_views(), 0),
        "new_users": (count_users_since(since), 0),
        "recent_users": (fetch_recent_users(), []),
        "average_price": (fetch_average_price(), None),
        "user_creation_times": (fetch_user_creation_times(since), []),
        "property_creation_times": (fetch_property_creation_times(since), []),
        "user_engagement": (fetch_user_engagement(), []),
        "property_table": (fetch_property_table(), []),
        "top_properties": (fetch_top_properties(), []),
        "user_table": (fetch_user_table(), []),
    }

    values = await asyncio.gather(
        *(isolate(name, coro, default) for name, (coro, default) in fan_out.items())
    )
    return build_dashboard_snapshot(dict(zip(fan_out, values)))
