from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from typing import Optional
from app.config import settings
from app.schemas.admin_dashboard import AdminDashboardResponse
from app.schemas.admin import (
    AdminUserUpdateRequest,
    PaginatedUsersResponse,
    AdminUserDetailEnvelope,
)
from app.schemas.auth import UserEnvelope
from app.schemas.common import MessageResponse
from app.schemas.complaint import ComplaintUpdateRequest, ComplaintEnvelope, PaginatedComplaintsResponse
from app.schemas.property import PropertyUpdateRequest, PropertyEnvelope, PaginatedPropertiesResponse
from app.schemas.verification import VerificationReviewRequest, VerificationEnvelope, PaginatedVerificationsResponse
from app.services.admin_dashboard_service import get_admin_dashboard_stats
from app.services.admin_service import list_users, get_user_details, update_user, delete_user, list_all_properties
from app.services.complaint_service import list_complaints, update_complaint
from app.services.property_service import update_property, delete_property
from app.services.verification_service import list_verifications, review_verification
from app.utils.dependencies import get_current_admin
from app.utils.http_errors import service_errors, not_found
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/dashboard", response_model=AdminDashboardResponse)
async def get_dashboard_stats(current_admin: dict = Depends(get_current_admin)):
    """
    Platform statistics for the admin dashboard (Admin only)
    Individual statistics that fail are reported as zero/empty
    """
    try:
        stats = await get_admin_dashboard_stats()
        return AdminDashboardResponse(data=stats)
    except Exception as e:
        logger.exception("Dashboard stats error")
        content = {"success": False, "message": "Server error fetching dashboard stats"}
        if settings.is_development:
            content["error"] = str(e)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


@router.get("/users", response_model=PaginatedUsersResponse)
async def get_all_users(
    role: Optional[str] = None,
    verification_status: Optional[str] = Query(None, alias="verificationStatus"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    current_admin: dict = Depends(get_current_admin),
):
    """List users with filters (Admin only)"""
    with service_errors():
        result = await list_users(
            role=role,
            verification_status=verification_status,
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    return PaginatedUsersResponse(data=result["items"], pagination=result["pagination"])


@router.get("/users/{user_id}", response_model=AdminUserDetailEnvelope)
async def get_user(user_id: str, current_admin: dict = Depends(get_current_admin)):
    details = await get_user_details(user_id)
    if not details:
        raise not_found("User")
    return AdminUserDetailEnvelope(data=details)


@router.put("/users/{user_id}", response_model=UserEnvelope)
async def update_user_endpoint(
    user_id: str,
    request: AdminUserUpdateRequest,
    current_admin: dict = Depends(get_current_admin),
):
    """Update name, role or verification status (Admin only)"""
    with service_errors():
        user = await update_user(user_id, request.model_dump(exclude_unset=True))
    if not user:
        raise not_found("User")
    return UserEnvelope(message="User updated successfully", data=user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user_endpoint(user_id: str, current_admin: dict = Depends(get_current_admin)):
    """Delete a user and everything they own (Admin only, not yourself)"""
    with service_errors():
        deleted = await delete_user(user_id, current_admin["id"])
    if not deleted:
        raise not_found("User")
    return MessageResponse(message="User deleted successfully")


@router.get("/properties", response_model=PaginatedPropertiesResponse)
async def get_all_properties(
    status_filter: Optional[str] = Query(None, alias="status"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    listing_type: Optional[str] = Query(None, alias="listingType"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    current_admin: dict = Depends(get_current_admin),
):
    """All listings in any status (Admin only)"""
    with service_errors():
        result = await list_all_properties(
            status=status_filter,
            property_type=property_type,
            listing_type=listing_type,
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    return PaginatedPropertiesResponse(data=result["items"], pagination=result["pagination"])


@router.put("/properties/{property_id}", response_model=PropertyEnvelope)
async def update_any_property(
    property_id: str,
    request: PropertyUpdateRequest,
    current_admin: dict = Depends(get_current_admin),
):
    with service_errors():
        prop = await update_property(property_id, current_admin, request.model_dump(exclude_unset=True))
    if not prop:
        raise not_found("Property")
    return PropertyEnvelope(message="Property updated successfully", data=prop)


@router.delete("/properties/{property_id}", response_model=MessageResponse)
async def delete_any_property(property_id: str, current_admin: dict = Depends(get_current_admin)):
    with service_errors():
        deleted = await delete_property(property_id, current_admin)
    if not deleted:
        raise not_found("Property")
    return MessageResponse(message="Property deleted successfully")


@router.get("/complaints", response_model=PaginatedComplaintsResponse)
async def get_all_complaints(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    current_admin: dict = Depends(get_current_admin),
):
    with service_errors():
        result = await list_complaints(
            status=status_filter,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    return PaginatedComplaintsResponse(data=result["items"], pagination=result["pagination"])


@router.put("/complaints/{complaint_id}", response_model=ComplaintEnvelope)
async def update_complaint_endpoint(
    complaint_id: str,
    request: ComplaintUpdateRequest,
    current_admin: dict = Depends(get_current_admin),
):
    with service_errors():
        complaint = await update_complaint(
            complaint_id,
            admin_id=current_admin["id"],
            status=request.status,
            resolution_notes=request.resolution_notes,
        )
    if not complaint:
        raise not_found("Complaint")
    return ComplaintEnvelope(message="Complaint updated successfully", data=complaint)


@router.get("/verifications", response_model=PaginatedVerificationsResponse)
async def get_verification_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("submittedAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    current_admin: dict = Depends(get_current_admin),
):
    with service_errors():
        result = await list_verifications(
            status=status_filter,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    return PaginatedVerificationsResponse(data=result["items"], pagination=result["pagination"])


@router.put("/verifications/{verification_id}/review", response_model=VerificationEnvelope)
async def review_verification_request(
    verification_id: str,
    request: VerificationReviewRequest,
    current_admin: dict = Depends(get_current_admin),
):
    """Approve or reject a verification request (Admin only)"""
    with service_errors():
        verification = await review_verification(
            verification_id,
            admin_id=current_admin["id"],
            status=request.status,
            status_reason=request.status_reason,
        )
    if not verification:
        raise not_found("Verification request")
    return VerificationEnvelope(message=f"Verification {request.status.upper()}", data=verification)
