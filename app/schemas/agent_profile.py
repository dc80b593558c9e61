from typing import List, Optional
from app.schemas.common import CamelModel


class AgentProfileResponse(CamelModel):
    experience: Optional[int] = None
    specialties: List[str] = []
    bio: Optional[str] = None
    license_number: Optional[str] = None
