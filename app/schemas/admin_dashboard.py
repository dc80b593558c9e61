from typing import Dict, List, Optional
from app.schemas.common import CamelModel


class TrendPoint(CamelModel):
    date: str
    count: int


class UserTableRow(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    verification_status: str
    is_email_verified: bool
    last_login: Optional[str] = None
    join_date: Optional[str] = None
    properties_count: int
    reviews_count: int
    favorites_count: int
    complaints_count: int
    avatar: Optional[str] = None
    experience: Optional[int] = None
    specialties: List[str] = []


class UserEngagement(CamelModel):
    user_id: str
    role: str
    last_active: Optional[str] = None
    properties_posted: int
    reviews_given: int
    favorites_added: int
    complaints_filed: int


class UserMetrics(CamelModel):
    total_users: int
    total_non_admin_users: int
    by_role: Dict[str, int]
    by_verification_status: Dict[str, int]
    new_last_30_days: int
    user_table_data: List[UserTableRow]
    registration_trends: List[TrendPoint]
    engagement_analytics: List[UserEngagement]


class PropertyTableRow(CamelModel):
    id: str
    title: str
    type: str
    listing_type: str
    status: str
    price: float
    currency: str
    location: str
    address: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[float] = None
    year_built: Optional[int] = None
    image_urls: List[str] = []
    video_urls: List[str] = []
    amenities: List[str] = []
    posted_by: str
    posted_by_id: Optional[str] = None
    managed_by: str
    managed_by_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    available_from: Optional[str] = None
    views: int
    favorites: int
    ratings: int
    complaints: int
    is_featured: bool


class TopProperty(CamelModel):
    id: str
    title: str
    type: str
    listing_type: str
    price: float
    currency: str
    location: str
    posted_by: str
    posted_by_email: Optional[str] = None
    posted_by_phone: Optional[str] = None
    views: int
    favorites: int
    ratings: int
    created_at: Optional[str] = None
    is_featured: bool


class PropertyMetrics(CamelModel):
    total_properties: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_listing_type: Dict[str, int]
    average_price: float
    property_table_data: List[PropertyTableRow]
    creation_trends: List[TrendPoint]
    top_performing: List[TopProperty]


class SystemHealth(CamelModel):
    pending_verifications: int
    pending_complaints: int


class EngagementTotals(CamelModel):
    total_ratings: int
    total_favorites: int
    total_views: int


class RecentUser(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: str
    verification_status: str
    created_at: Optional[str] = None
    last_login: Optional[str] = None


class RecentActivity(CamelModel):
    recent_users: List[RecentUser]
    recent_properties: List[PropertyTableRow]


class DashboardAnalytics(CamelModel):
    user_growth: List[TrendPoint]
    property_growth: List[TrendPoint]
    user_engagement: List[UserEngagement]
    top_properties: List[TopProperty]


class DashboardSnapshot(CamelModel):
    user_metrics: UserMetrics
    property_metrics: PropertyMetrics
    system_health: SystemHealth
    engagement: EngagementTotals
    recent_activity: RecentActivity
    analytics: DashboardAnalytics


class AdminDashboardResponse(CamelModel):
    success: bool = True
    data: DashboardSnapshot
