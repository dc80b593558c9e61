from fastapi import APIRouter, Depends, status, Query
from app.schemas.complaint import ComplaintCreateRequest, ComplaintEnvelope, PaginatedComplaintsResponse
from app.services.complaint_service import create_complaint, get_user_complaints
from app.utils.dependencies import get_current_user
from app.utils.http_errors import service_errors, not_found

router = APIRouter(prefix="/api/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintEnvelope, status_code=status.HTTP_201_CREATED)
async def file_complaint(request: ComplaintCreateRequest, current_user: dict = Depends(get_current_user)):
    """File a complaint about a property"""
    with service_errors():
        complaint = await create_complaint(
            client_id=current_user["id"],
            property_id=request.property_id,
            subject=request.subject,
            description=request.description,
        )
    if not complaint:
        raise not_found("Property")
    return ComplaintEnvelope(message="Complaint submitted successfully", data=complaint)


@router.get("/mine", response_model=PaginatedComplaintsResponse)
async def my_complaints(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    result = await get_user_complaints(current_user["id"], page=page, limit=limit)
    return PaginatedComplaintsResponse(data=result["items"], pagination=result["pagination"])
