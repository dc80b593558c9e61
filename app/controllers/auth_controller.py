from fastapi import APIRouter, HTTPException, Depends, Request, status, Query
from typing import Optional
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ChangePasswordRequest,
    UserEnvelope,
    ProfileEnvelope,
    LoginResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.property import PaginatedPropertiesResponse
from app.services.auth_service import (
    register_user,
    login_user,
    logout_user,
    get_user_profile,
    update_user_profile,
    change_password,
)
from app.services.property_service import get_user_properties
from app.utils.dependencies import get_current_user
from app.utils.http_errors import service_errors, not_found
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """Register a new client, landlord or agent account"""
    with service_errors():
        user = await register_user(
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            role=request.role,
        )
    return UserEnvelope(message="User registered successfully", data=user)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """Login and receive a bearer token"""
    result = await login_user(request.email, request.password)

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return LoginResponse(data=result)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, current_user: dict = Depends(get_current_user)):
    """Invalidate the session of the presented token"""
    await logout_user(request.state.token)
    logger.info(f"User {current_user['id']} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=ProfileEnvelope)
async def get_profile(current_user: dict = Depends(get_current_user)):
    profile = await get_user_profile(current_user["id"])
    if not profile:
        raise not_found("User")
    return ProfileEnvelope(data=profile)


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(request: ProfileUpdateRequest, current_user: dict = Depends(get_current_user)):
    update_data = request.model_dump(exclude_unset=True)
    with service_errors():
        user = await update_user_profile(current_user["id"], update_data)
    if not user:
        raise not_found("User")
    return UserEnvelope(message="Profile updated successfully", data=user)


@router.put("/change-password", response_model=MessageResponse)
async def update_password(request: ChangePasswordRequest, current_user: dict = Depends(get_current_user)):
    """Change password; every session of the user is signed out"""
    with service_errors():
        changed = await change_password(current_user["id"], request.current_password, request.new_password)
    if not changed:
        raise not_found("User")
    return MessageResponse(message="Password changed successfully. Please log in again.")


@router.get("/properties", response_model=PaginatedPropertiesResponse)
async def my_properties(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
):
    """Listings posted by the current user, in any status"""
    with service_errors():
        result = await get_user_properties(current_user["id"], status=status_filter, page=page, limit=limit)
    return PaginatedPropertiesResponse(data=result["items"], pagination=result["pagination"])
