from typing import Dict, List, Optional
from app.schemas.common import CamelModel, PaginationMeta
from app.schemas.auth import UserResponse, ProfileResponse
from app.schemas.complaint import ComplaintResponse
from app.schemas.property import PropertyResponse


class AdminUserUpdateRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    verification_status: Optional[str] = None


class AdminUserListItem(UserResponse):
    counts: Dict[str, int] = {}


class AdminUserDetail(ProfileResponse):
    """User with verification info, agent profile and latest activity"""
    recent_properties: List[PropertyResponse] = []
    recent_complaints: List[ComplaintResponse] = []


class PaginatedUsersResponse(CamelModel):
    success: bool = True
    data: List[AdminUserListItem]
    pagination: PaginationMeta


class AdminUserDetailEnvelope(CamelModel):
    success: bool = True
    data: AdminUserDetail
