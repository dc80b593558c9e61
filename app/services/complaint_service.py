from typing import Optional
import logging
import uuid
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import Complaint, Property
from app.models.enums import ComplaintStatus
from app.services.serializers import complaint_to_dict
from app.utils.pagination import page_window, pagination_meta, resolve_sort
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

COMPLAINT_SORT_FIELDS = {
    "createdAt": Complaint.created_at,
    "updatedAt": Complaint.updated_at,
    "status": Complaint.status,
}


def _parse_status(value: str) -> ComplaintStatus:
    try:
        return ComplaintStatus(str(value).upper())
    except ValueError:
        allowed = ", ".join(s.value for s in ComplaintStatus)
        raise ValueError(f"Invalid status '{value}'. Allowed values: {allowed}")


async def create_complaint(client_id: str, property_id: str, subject: str, description: str) -> Optional[dict]:
    """File a complaint against a property; None when the property does not exist"""
    if not subject.strip() or not description.strip():
        raise ValueError("Subject and description are required")

    async with AsyncSessionLocal() as session:
        if not await session.get(Property, property_id):
            return None

        complaint = Complaint(
            id=str(uuid.uuid4()),
            client_id=client_id,
            property_id=property_id,
            subject=subject.strip(),
            description=description.strip(),
            status=ComplaintStatus.PENDING,
        )
        session.add(complaint)
        await session.commit()

        logger.info(f"Complaint {complaint.id} filed by {client_id} on property {property_id}")
        return complaint_to_dict(complaint)


async def _paginated(conditions: list, page: int, limit: int, order_by) -> dict:
    offset, limit = page_window(page, limit)

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(Complaint.id)).where(*conditions)
        )).scalar() or 0

        stmt = (
            select(Complaint)
            .where(*conditions)
            .options(selectinload(Complaint.client), selectinload(Complaint.property))
            .order_by(order_by, Complaint.id)
            .offset(offset)
            .limit(limit)
        )
        complaints = (await session.execute(stmt)).scalars().all()

        return {
            "items": [complaint_to_dict(c, include_people=True) for c in complaints],
            "pagination": pagination_meta(total, page, limit),
        }


async def get_user_complaints(client_id: str, page: int = 1, limit: int = 10) -> dict:
    return await _paginated([Complaint.client_id == client_id], page, limit, Complaint.created_at.desc())


async def list_complaints(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
) -> dict:
    """Admin listing"""
    order_by = resolve_sort(sort_by, sort_order, COMPLAINT_SORT_FIELDS)
    conditions = []
    if status:
        conditions.append(Complaint.status == _parse_status(status))
    return await _paginated(conditions, page, limit, order_by)


async def update_complaint(
    complaint_id: str,
    admin_id: str,
    status: str,
    resolution_notes: Optional[str] = None,
) -> Optional[dict]:
    """Move a complaint through its workflow; RESOLVED stamps who and when"""
    new_status = _parse_status(status)

    async with AsyncSessionLocal() as session:
        complaint = await session.get(Complaint, complaint_id)
        if not complaint:
            return None

        complaint.status = new_status
        if resolution_notes is not None:
            complaint.resolution_notes = resolution_notes
        if new_status == ComplaintStatus.RESOLVED:
            complaint.resolved_at = utcnow()
            complaint.resolved_by = admin_id
        complaint.updated_at = utcnow()

        await session.commit()

        logger.info(f"Complaint {complaint_id} set to {new_status.value} by {admin_id}")
        return complaint_to_dict(complaint)
