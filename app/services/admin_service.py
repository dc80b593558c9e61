from typing import Optional
import logging
from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import User, Property, Complaint
from app.models.enums import UserRole, VerificationStatus, PropertyStatus, PropertyType, ListingType
from app.services.property_service import list_properties
from app.services.query_helpers import user_engagement_columns, counts_from_row, USER_COUNT_LABELS
from app.services.serializers import (
    user_to_dict,
    verification_to_dict,
    agent_profile_to_dict,
    property_to_dict,
    complaint_to_dict,
)
from app.utils.pagination import page_window, pagination_meta, resolve_sort

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = {
    "createdAt": User.created_at,
    "lastLogin": User.last_login,
    "email": User.email,
    "firstName": User.first_name,
    "lastName": User.last_name,
    "role": User.role,
}

ADMIN_EDITABLE_FIELDS = ("first_name", "last_name", "role", "verification_status")


def _parse(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Invalid {field_name} '{value}'. Allowed values: {allowed}")


async def list_users(
    role: Optional[str] = None,
    verification_status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    """Paginated user directory with activity counts"""
    order_by = resolve_sort(sort_by, sort_order, USER_SORT_FIELDS)
    offset, limit = page_window(page, limit)

    conditions = []
    if role:
        conditions.append(User.role == _parse(UserRole, role, "role"))
    if verification_status:
        conditions.append(User.verification_status == _parse(VerificationStatus, verification_status, "verificationStatus"))
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
            User.phone.ilike(pattern),
        ))

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(User.id)).where(*conditions)
        )).scalar() or 0

        stmt = (
            select(User, *user_engagement_columns())
            .where(*conditions)
            .order_by(order_by, User.id)
            .offset(offset)
            .limit(limit)
        )
        rows = (await session.execute(stmt)).all()

        items = []
        for row in rows:
            data = user_to_dict(row[0])
            data["counts"] = {k: int(v or 0) for k, v in counts_from_row(row, USER_COUNT_LABELS).items()}
            items.append(data)

        return {"items": items, "pagination": pagination_meta(total, page, limit)}


async def get_user_details(user_id: str) -> Optional[dict]:
    """User with verification, agent profile, latest properties and complaints"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User, *user_engagement_columns())
            .where(User.id == user_id)
            .options(selectinload(User.verification_info), selectinload(User.agent_profile))
        )
        row = (await session.execute(stmt)).first()
        if not row:
            return None
        user = row[0]

        properties_stmt = (
            select(Property)
            .where(Property.posted_by_id == user_id)
            .order_by(Property.created_at.desc())
            .limit(5)
        )
        complaints_stmt = (
            select(Complaint)
            .where(Complaint.client_id == user_id)
            .order_by(Complaint.created_at.desc())
            .limit(5)
        )
        properties = (await session.execute(properties_stmt)).scalars().all()
        complaints = (await session.execute(complaints_stmt)).scalars().all()

        data = user_to_dict(user)
        data["verification_info"] = verification_to_dict(user.verification_info)
        data["agent_profile"] = agent_profile_to_dict(user.agent_profile)
        data["counts"] = {k: int(v or 0) for k, v in counts_from_row(row, USER_COUNT_LABELS).items()}
        data["recent_properties"] = [property_to_dict(p) for p in properties]
        data["recent_complaints"] = [complaint_to_dict(c) for c in complaints]
        return data


async def update_user(user_id: str, update_data: dict) -> Optional[dict]:
    """Admin edit of name, role and verification status"""
    changes = {k: v for k, v in update_data.items() if k in ADMIN_EDITABLE_FIELDS and v is not None}
    if not changes:
        raise ValueError("No valid fields provided for update")

    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        if not user:
            return None

        if "first_name" in changes:
            user.first_name = changes["first_name"]
        if "last_name" in changes:
            user.last_name = changes["last_name"]
        if "role" in changes:
            user.role = _parse(UserRole, changes["role"], "role")
        if "verification_status" in changes:
            user.verification_status = _parse(VerificationStatus, changes["verification_status"], "verificationStatus")

        await session.commit()
        await session.refresh(user)

        logger.info(f"Admin updated user {user_id}: {sorted(changes)}")
        return user_to_dict(user)


async def delete_user(user_id: str, admin_id: str) -> bool:
    """Delete a user and (by cascade) everything they own"""
    if user_id == admin_id:
        raise ValueError("You cannot delete your own account")

    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        if not user:
            return False

        await session.delete(user)
        await session.commit()

        logger.info(f"Admin {admin_id} deleted user {user_id}")
        return True


async def list_all_properties(
    status: Optional[str] = None,
    property_type: Optional[str] = None,
    listing_type: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    """Every listing regardless of status, for moderation"""
    conditions = []
    if status:
        conditions.append(Property.status == _parse(PropertyStatus, status, "status"))
    if property_type:
        conditions.append(Property.type == _parse(PropertyType, property_type, "propertyType"))
    if listing_type:
        conditions.append(Property.listing_type == _parse(ListingType, listing_type, "listingType"))
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Property.title.ilike(pattern),
            Property.address.ilike(pattern),
            Property.city.ilike(pattern),
        ))

    return await list_properties(conditions, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
