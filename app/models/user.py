from sqlalchemy import Column, String, Boolean, DateTime, Enum, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.models.enums import UserRole, VerificationStatus
from app.utils.timeutils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, unique=True, nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.CLIENT, index=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    verification_status = Column(
        Enum(VerificationStatus, name="verification_status"),
        nullable=False,
        default=VerificationStatus.UNVERIFIED,
        index=True,
    )
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships (rows are removed by ON DELETE CASCADE in the database)
    verification_info = relationship(
        "UserVerification",
        back_populates="user",
        uselist=False,
        foreign_keys="UserVerification.user_id",
        passive_deletes=True,
    )
    agent_profile = relationship(
        "AgentProfile", back_populates="user", uselist=False, passive_deletes=True
    )
    sessions = relationship("Session", back_populates="user", passive_deletes=True)
    properties_posted = relationship(
        "Property", back_populates="posted_by", foreign_keys="Property.posted_by_id", passive_deletes=True
    )
    properties_managed = relationship(
        "Property", back_populates="managed_by_agent", foreign_keys="Property.managed_by_agent_id", passive_deletes=True
    )
    ratings = relationship("Rating", back_populates="client", passive_deletes=True)
    favorites = relationship("Favorite", back_populates="user", passive_deletes=True)
    complaints = relationship(
        "Complaint", back_populates="client", foreign_keys="Complaint.client_id", passive_deletes=True
    )

    __table_args__ = (
        Index('idx_users_role_created', 'role', 'created_at'),
    )
