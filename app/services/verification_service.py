from typing import Optional
import logging
import uuid
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from app.database.connection import AsyncSessionLocal
from app.models import User, UserVerification
from app.models.enums import VerificationStatus
from app.services.errors import ConflictError
from app.services.serializers import verification_to_dict, person_summary
from app.utils.pagination import page_window, pagination_meta, resolve_sort
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

VERIFICATION_SORT_FIELDS = {
    "submittedAt": UserVerification.submitted_at,
    "reviewedAt": UserVerification.reviewed_at,
    "status": UserVerification.status,
}

REVIEW_OUTCOMES = (VerificationStatus.VERIFIED, VerificationStatus.REJECTED)


def _parse_status(value: str) -> VerificationStatus:
    try:
        return VerificationStatus(str(value).upper())
    except ValueError:
        allowed = ", ".join(s.value for s in VerificationStatus)
        raise ValueError(f"Invalid status '{value}'. Allowed values: {allowed}")


async def submit_verification(user_id: str, document_url: str) -> Optional[dict]:
    """
    Submit (or re-submit after rejection) an identity verification request
    The request and the user's verification_status become PENDING in one commit
    """
    if not (document_url or "").strip():
        raise ValueError("documentUrl is required")

    async with AsyncSessionLocal() as session:
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.verification_info))
        )
        user = (await session.execute(stmt)).scalar_one_or_none()
        if not user:
            return None

        if user.verification_status == VerificationStatus.VERIFIED:
            raise ConflictError("User is already verified")

        verification = user.verification_info
        if verification is None:
            verification = UserVerification(id=str(uuid.uuid4()), user_id=user_id)
            session.add(verification)

        verification.status = VerificationStatus.PENDING
        verification.document_url = document_url.strip()
        verification.status_reason = None
        verification.submitted_at = utcnow()
        verification.reviewed_at = None
        verification.reviewed_by = None
        user.verification_status = VerificationStatus.PENDING

        await session.commit()

        logger.info(f"Verification submitted by user {user_id}")
        return verification_to_dict(verification)


async def list_verifications(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "submittedAt",
    sort_order: str = "desc",
) -> dict:
    order_by = resolve_sort(sort_by, sort_order, VERIFICATION_SORT_FIELDS)
    offset, limit = page_window(page, limit)
    conditions = []
    if status:
        conditions.append(UserVerification.status == _parse_status(status))

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count(UserVerification.id)).where(*conditions)
        )).scalar() or 0

        stmt = (
            select(UserVerification)
            .where(*conditions)
            .options(selectinload(UserVerification.user))
            .order_by(order_by, UserVerification.id)
            .offset(offset)
            .limit(limit)
        )
        verifications = (await session.execute(stmt)).scalars().all()

        items = []
        for v in verifications:
            data = verification_to_dict(v)
            data["user"] = person_summary(v.user)
            data["user"]["email"] = v.user.email
            items.append(data)

        return {"items": items, "pagination": pagination_meta(total, page, limit)}


async def review_verification(
    verification_id: str,
    admin_id: str,
    status: str,
    status_reason: Optional[str] = None,
) -> Optional[dict]:
    """Approve or reject a PENDING request; request and user are updated together"""
    outcome = _parse_status(status)
    if outcome not in REVIEW_OUTCOMES:
        raise ValueError("Review status must be VERIFIED or REJECTED")
    if outcome == VerificationStatus.REJECTED and not (status_reason or "").strip():
        raise ValueError("statusReason is required when rejecting a verification")

    async with AsyncSessionLocal() as session:
        stmt = (
            select(UserVerification)
            .where(UserVerification.id == verification_id)
            .options(selectinload(UserVerification.user))
        )
        verification = (await session.execute(stmt)).scalar_one_or_none()
        if not verification:
            return None

        if verification.status != VerificationStatus.PENDING:
            raise ValueError(f"Verification has already been reviewed ({verification.status.value})")

        reviewed_at = utcnow()
        verification.status = outcome
        verification.status_reason = (status_reason or "").strip() or None
        verification.reviewed_at = reviewed_at
        verification.reviewed_by = admin_id
        verification.user.verification_status = outcome
        verification.user.updated_at = reviewed_at

        await session.commit()

        logger.info(f"Verification {verification_id} {outcome.value} by {admin_id}")
        data = verification_to_dict(verification)
        data["user"] = person_summary(verification.user)
        return data
