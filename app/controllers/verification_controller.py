from fastapi import APIRouter, Depends, status
from app.schemas.verification import VerificationSubmitRequest, VerificationEnvelope
from app.services.verification_service import submit_verification
from app.utils.dependencies import get_current_user
from app.utils.http_errors import service_errors, not_found

router = APIRouter(prefix="/api/verifications", tags=["Verifications"])


@router.post("", response_model=VerificationEnvelope, status_code=status.HTTP_201_CREATED)
async def request_verification(request: VerificationSubmitRequest, current_user: dict = Depends(get_current_user)):
    """Submit (or re-submit) an identity verification request"""
    with service_errors():
        verification = await submit_verification(current_user["id"], request.document_url)
    if not verification:
        raise not_found("User")
    return VerificationEnvelope(message="Verification request submitted", data=verification)
