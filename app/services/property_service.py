from typing import Optional, List
from datetime import timedelta
from decimal import Decimal, InvalidOperation
import logging
import uuid
from sqlalchemy import select, func, or_, and_, String, cast
from sqlalchemy.orm import selectinload
from app.config import settings
from app.database.connection import AsyncSessionLocal
from app.models import Property, PropertyView, Rating, User
from app.models.enums import PropertyStatus, PropertyType, ListingType, UserRole, POSTER_ROLES, is_admin_role
from app.services.query_helpers import property_engagement_columns, counts_from_row, PROPERTY_COUNT_LABELS
from app.services.serializers import property_to_dict, rating_to_dict, average_rating
from app.utils.pagination import page_window, pagination_meta, resolve_sort
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

PROPERTY_SORT_FIELDS = {
    "createdAt": Property.created_at,
    "price": Property.price,
    "title": Property.title,
    "bedrooms": Property.bedrooms,
    "bathrooms": Property.bathrooms,
    "area": Property.area,
    "updatedAt": Property.updated_at,
}

# Fields a poster/agent may change through the update endpoint
UPDATABLE_FIELDS = (
    "title", "description", "type", "listing_type", "status", "price", "currency",
    "address", "city", "state", "zip_code", "latitude", "longitude", "bedrooms",
    "bathrooms", "area", "year_built", "image_urls", "video_urls", "amenities",
    "available_from", "managed_by_agent_id", "is_featured",
)

SIMILAR_PRICE_BAND = Decimal("0.3")


def _parse_enum(enum_cls, value, field_name: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {field_name} '{value}'. Allowed values: {allowed}")


def _parse_price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError("Price must be a number")
    if not price.is_finite() or price < 0:
        raise ValueError("Price must be a non-negative number")
    return price


def _role_of(user: dict) -> UserRole:
    return UserRole(user["role"])


def build_property_filters(
    listing_type: Optional[str] = None,
    property_type: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
    amenities: Optional[str] = None,
    search: Optional[str] = None,
    is_featured: Optional[bool] = None,
    user_id: Optional[str] = None,
) -> list:
    """WHERE clauses for the public listing search"""
    conditions = []

    # A poster's own page shows every status; the public search only AVAILABLE
    if user_id:
        conditions.append(Property.posted_by_id == user_id)
    else:
        conditions.append(Property.status == PropertyStatus.AVAILABLE)

    if listing_type:
        conditions.append(Property.listing_type == _parse_enum(ListingType, listing_type, "listingType"))
    if property_type:
        conditions.append(Property.type == _parse_enum(PropertyType, property_type, "propertyType"))
    if city:
        conditions.append(Property.city.ilike(f"%{city}%"))
    if state:
        conditions.append(Property.state.ilike(f"%{state}%"))
    if min_price is not None:
        conditions.append(Property.price >= min_price)
    if max_price is not None:
        conditions.append(Property.price <= max_price)
    if bedrooms is not None:
        conditions.append(Property.bedrooms >= bedrooms)
    if bathrooms is not None:
        conditions.append(Property.bathrooms >= bathrooms)
    if amenities:
        wanted = [a.strip() for a in amenities.split(",") if a.strip()]
        if wanted:
            # JSON list rendered as text, e.g. ["Pool", "Gym"]
            amenities_text = cast(Property.amenities, String)
            conditions.append(or_(*[amenities_text.ilike(f'%"{a}"%') for a in wanted]))
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(
            Property.title.ilike(pattern),
            Property.description.ilike(pattern),
            Property.address.ilike(pattern),
        ))
    if is_featured is not None:
        conditions.append(Property.is_featured == is_featured)

    return conditions


async def list_properties(
    conditions: list,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    """Paginated listings with poster, agent and engagement counts"""
    order_by = resolve_sort(sort_by, sort_order, PROPERTY_SORT_FIELDS)
    offset, limit = page_window(page, limit)

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(Property.id)).where(*conditions)
        )).scalar() or 0

        stmt = (
            select(Property, *property_engagement_columns())
            .where(*conditions)
            .options(selectinload(Property.posted_by), selectinload(Property.managed_by_agent))
            .order_by(order_by, Property.id)
            .offset(offset)
            .limit(limit)
        )
        rows = (await session.execute(stmt)).all()

        return {
            "items": [
                property_to_dict(row[0], counts_from_row(row, PROPERTY_COUNT_LABELS), include_people=True)
                for row in rows
            ],
            "pagination": pagination_meta(total, page, limit),
        }


async def get_user_properties(
    user_id: str,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """Caller's own listings, any status unless filtered"""
    conditions = [Property.posted_by_id == user_id]
    if status:
        conditions.append(Property.status == _parse_enum(PropertyStatus, status, "status"))
    return await list_properties(conditions, page=page, limit=limit)


async def create_property(poster: dict, data: dict, image_urls: List[str]) -> dict:
    """
    Create a listing for a LANDLORD / AGENT / admin poster
    image_urls must already be hosted (Cloudinary secure URLs or caller-provided)
    """
    if _role_of(poster) not in POSTER_ROLES:
        raise PermissionError("Only landlords, agents and admins can create listings")

    for field in ("title", "description", "address", "city", "state"):
        if not (data.get(field) or "").strip():
            raise ValueError(f"{field} is required")
    if not image_urls:
        raise ValueError("At least one image is required")

    is_admin = is_admin_role(poster["role"])
    managed_by = data.get("managed_by_agent_id")
    if _role_of(poster) == UserRole.AGENT and not managed_by:
        managed_by = poster["id"]

    async with AsyncSessionLocal() as session:
        if managed_by and managed_by != poster["id"]:
            agent = await session.get(User, managed_by)
            if not agent or agent.role != UserRole.AGENT:
                raise ValueError("managedByAgentId must reference an agent")

        prop = Property(
            id=str(uuid.uuid4()),
            title=data["title"].strip(),
            description=data["description"].strip(),
            type=_parse_enum(PropertyType, data.get("type"), "type"),
            listing_type=_parse_enum(ListingType, data.get("listing_type"), "listingType"),
            status=_parse_enum(PropertyStatus, data.get("status"), "status") or PropertyStatus.AVAILABLE,
            price=_parse_price(data.get("price")),
            currency=data.get("currency") or "NGN",
            address=data["address"].strip(),
            city=data["city"].strip(),
            state=data["state"].strip(),
            zip_code=data.get("zip_code"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            bedrooms=data.get("bedrooms"),
            bathrooms=data.get("bathrooms"),
            area=data.get("area"),
            year_built=data.get("year_built"),
            image_urls=list(image_urls),
            video_urls=list(data.get("video_urls") or []),
            amenities=list(data.get("amenities") or []),
            is_featured=bool(data.get("is_featured")) if is_admin else False,
            available_from=data.get("available_from"),
            posted_by_id=poster["id"],
            managed_by_agent_id=managed_by,
        )
        if prop.type is None or prop.listing_type is None:
            raise ValueError("type and listingType are required")

        session.add(prop)
        await session.commit()

        logger.info(f"Property {prop.id} created by {poster['id']}")

    return await get_property_by_id(prop.id, track_view=False)


async def _record_view(
    session,
    property_id: str,
    viewer_id: Optional[str],
    ip_address: Optional[str],
    user_agent: Optional[str],
) -> bool:
    """Insert a PropertyView unless the same viewer saw the listing recently"""
    if not viewer_id and not ip_address:
        return False

    window_start = utcnow() - timedelta(minutes=settings.VIEW_DEDUP_MINUTES)
    if viewer_id:
        viewer_match = PropertyView.user_id == viewer_id
    else:
        viewer_match = and_(PropertyView.user_id.is_(None), PropertyView.ip_address == ip_address)

    stmt = select(PropertyView.id).where(
        PropertyView.property_id == property_id,
        viewer_match,
        PropertyView.viewed_at >= window_start,
    ).limit(1)
    if (await session.execute(stmt)).first():
        return False

    session.add(PropertyView(
        id=str(uuid.uuid4()),
        property_id=property_id,
        user_id=viewer_id,
        ip_address=ip_address,
        user_agent=user_agent,
    ))
    await session.commit()
    return True


async def get_property_by_id(
    property_id: str,
    viewer_id: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    track_view: bool = True,
) -> Optional[dict]:
    """Listing detail with poster, agent, ratings and counts"""
    async with AsyncSessionLocal() as session:
        exists = (await session.execute(
            select(Property.id).where(Property.id == property_id)
        )).first()
        if not exists:
            return None

        if track_view:
            await _record_view(session, property_id, viewer_id, ip_address, user_agent)

        stmt = (
            select(Property, *property_engagement_columns())
            .where(Property.id == property_id)
            .options(
                selectinload(Property.posted_by),
                selectinload(Property.managed_by_agent),
                selectinload(Property.ratings).selectinload(Rating.client),
            )
        )
        row = (await session.execute(stmt)).first()
        prop = row[0]

        ratings = sorted(prop.ratings, key=lambda r: r.created_at, reverse=True)
        data = property_to_dict(prop, counts_from_row(row, PROPERTY_COUNT_LABELS), include_people=True)
        data["ratings"] = [rating_to_dict(r, include_client=True) for r in ratings]
        data["average_rating"] = average_rating(r.rating for r in ratings)
        data["total_ratings"] = len(ratings)
        return data


def _can_edit(user: dict, prop: Property) -> bool:
    if is_admin_role(user["role"]):
        return True
    return user["id"] in (prop.posted_by_id, prop.managed_by_agent_id)


async def update_property(property_id: str, user: dict, update_data: dict) -> Optional[dict]:
    """Update a listing; poster, managing agent or admin"""
    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return None

        if not _can_edit(user, prop):
            raise PermissionError("You do not have permission to update this property")

        is_admin = is_admin_role(user["role"])
        if "is_featured" in update_data and not is_admin:
            raise PermissionError("Only admins can change the featured flag")

        for field in UPDATABLE_FIELDS:
            if field not in update_data:
                continue
            value = update_data[field]
            if field == "type":
                value = _parse_enum(PropertyType, value, "type")
            elif field == "listing_type":
                value = _parse_enum(ListingType, value, "listingType")
            elif field == "status":
                value = _parse_enum(PropertyStatus, value, "status")
            elif field == "price":
                value = _parse_price(value)
            elif field in ("image_urls", "video_urls", "amenities"):
                value = list(value or [])
            if value is None and field in ("title", "description", "type", "listing_type", "status", "price",
                                           "address", "city", "state"):
                raise ValueError(f"{field} cannot be empty")
            setattr(prop, field, value)

        if not prop.image_urls:
            raise ValueError("At least one image is required")

        prop.updated_at = utcnow()
        await session.commit()

        logger.info(f"Property {property_id} updated by {user['id']}")

    return await get_property_by_id(property_id, track_view=False)


async def delete_property(property_id: str, user: dict) -> bool:
    """Delete a listing; poster or admin. Join records cascade."""
    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return False

        if not is_admin_role(user["role"]) and prop.posted_by_id != user["id"]:
            raise PermissionError("You do not have permission to delete this property")

        await session.delete(prop)
        await session.commit()

        logger.info(f"Property {property_id} deleted by {user['id']}")
        return True


async def get_similar_properties(property_id: str, limit: int = 4) -> Optional[List[dict]]:
    """AVAILABLE listings of the same type, listing type and city within +/-30% of the price"""
    async with AsyncSessionLocal() as session:
        prop = await session.get(Property, property_id)
        if not prop:
            return None

        price = Decimal(str(prop.price))
        stmt = (
            select(Property, *property_engagement_columns())
            .where(
                Property.id != property_id,
                Property.status == PropertyStatus.AVAILABLE,
                Property.type == prop.type,
                Property.listing_type == prop.listing_type,
                Property.city == prop.city,
                Property.price >= price * (1 - SIMILAR_PRICE_BAND),
                Property.price <= price * (1 + SIMILAR_PRICE_BAND),
            )
            .options(selectinload(Property.posted_by), selectinload(Property.managed_by_agent))
            .order_by(Property.created_at.desc())
            .limit(max(1, min(limit, 20)))
        )
        rows = (await session.execute(stmt)).all()

        return [
            property_to_dict(row[0], counts_from_row(row, PROPERTY_COUNT_LABELS), include_people=True)
            for row in rows
        ]
