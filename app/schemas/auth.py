from pydantic import EmailStr
from typing import Dict, Optional
from app.schemas.common import CamelModel
from app.schemas.agent_profile import AgentProfileResponse
from app.schemas.verification import VerificationResponse


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ProfileUpdateRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    is_email_verified: bool
    verification_status: str
    created_at: Optional[str] = None
    last_login: Optional[str] = None


class ProfileResponse(UserResponse):
    verification_info: Optional[VerificationResponse] = None
    agent_profile: Optional[AgentProfileResponse] = None
    counts: Dict[str, int] = {}


class UserEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: UserResponse


class ProfileEnvelope(CamelModel):
    success: bool = True
    data: ProfileResponse


class LoginData(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


class LoginResponse(CamelModel):
    success: bool = True
    message: str = "Login successful"
    data: LoginData
