from typing import Optional
from app.schemas.common import CamelModel


class PersonSummary(CamelModel):
    """Public identity of a poster, agent or rater"""
    id: str
    first_name: str
    last_name: str
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
