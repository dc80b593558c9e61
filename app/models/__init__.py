# Database models
from app.models.user import User
from app.models.agent_profile import AgentProfile
from app.models.user_verification import UserVerification
from app.models.session import Session
from app.models.property import Property
from app.models.engagement import Favorite, Rating, Complaint, PropertyView

__all__ = [
    "User",
    "AgentProfile",
    "UserVerification",
    "Session",
    "Property",
    "Favorite",
    "Rating",
    "Complaint",
    "PropertyView",
]
