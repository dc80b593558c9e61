from sqlalchemy import Column, String, Integer, Float, Numeric, Boolean, Text, JSON, DateTime, Enum, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.models.enums import PropertyStatus, PropertyType, ListingType
from app.utils.timeutils import utcnow


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Enum(PropertyType, name="property_type"), nullable=False, index=True)
    listing_type = Column(Enum(ListingType, name="listing_type"), nullable=False, index=True)
    status = Column(
        Enum(PropertyStatus, name="property_status"),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
    )
    price = Column(Numeric(14, 2), nullable=False)
    currency = Column(String, nullable=False, default="NGN")
    address = Column(String, nullable=False)
    city = Column(String, nullable=False, index=True)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    area = Column(Float, nullable=True)  # square metres
    year_built = Column(Integer, nullable=True)
    image_urls = Column(JSON, nullable=False, default=list)
    video_urls = Column(JSON, nullable=False, default=list)
    amenities = Column(JSON, nullable=False, default=list)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    available_from = Column(DateTime(timezone=True), nullable=True)
    posted_by_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    managed_by_agent_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Relationships
    posted_by = relationship("User", back_populates="properties_posted", foreign_keys=[posted_by_id])
    managed_by_agent = relationship("User", back_populates="properties_managed", foreign_keys=[managed_by_agent_id])
    ratings = relationship("Rating", back_populates="property", passive_deletes=True)
    favorited_by = relationship("Favorite", back_populates="property", passive_deletes=True)
    complaints = relationship("Complaint", back_populates="property", passive_deletes=True)
    views = relationship("PropertyView", back_populates="property", passive_deletes=True)

    # Composite indexes for common query patterns
    __table_args__ = (
        Index('idx_property_status_created', 'status', 'created_at'),
        Index('idx_property_search', 'status', 'type', 'listing_type', 'city'),
        Index('idx_property_poster_status', 'posted_by_id', 'status'),
    )
