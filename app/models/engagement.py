"""
Engagement join records: favorites, ratings, complaints and property views
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, Enum, ForeignKey, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.models.enums import ComplaintStatus
from app.utils.timeutils import utcnow


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    user = relationship("User", back_populates="favorites")
    property = relationship("Property", back_populates="favorited_by")

    __table_args__ = (
        UniqueConstraint('property_id', 'user_id', name='uq_favorite_property_user'),
    )


class Rating(Base):
    __tablename__ = "ratings"

    id = Column(String, primary_key=True)
    client_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    client = relationship("User", back_populates="ratings")
    property = relationship("Property", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint('property_id', 'client_id', name='uq_rating_property_client'),
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_rating_range'),
    )


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String, primary_key=True)
    client_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(
        Enum(ComplaintStatus, name="complaint_status"),
        nullable=False,
        default=ComplaintStatus.PENDING,
        index=True,
    )
    resolution_notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    client = relationship("User", back_populates="complaints", foreign_keys=[client_id])
    property = relationship("Property", back_populates="complaints")


class PropertyView(Base):
    __tablename__ = "property_views"

    id = Column(String, primary_key=True)
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    viewed_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    property = relationship("Property", back_populates="views")

    # Dedup lookups: same property, same viewer, recent timestamp
    __table_args__ = (
        Index('idx_views_property_user', 'property_id', 'user_id', 'viewed_at'),
        Index('idx_views_property_ip', 'property_id', 'ip_address', 'viewed_at'),
    )
