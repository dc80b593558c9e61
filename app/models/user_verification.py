from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.models.enums import VerificationStatus
from app.utils.timeutils import utcnow


class UserVerification(Base):
    __tablename__ = "user_verifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    status = Column(
        Enum(VerificationStatus, name="verification_status"),
        nullable=False,
        default=VerificationStatus.PENDING,
        index=True,
    )
    document_url = Column(String, nullable=True)
    status_reason = Column(Text, nullable=True)  # required when REJECTED
    submitted_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="verification_info", foreign_keys=[user_id])
