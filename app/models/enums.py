import enum


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    LANDLORD = "LANDLORD"
    AGENT = "AGENT"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class VerificationStatus(str, enum.Enum):
    UNVERIFIED = "UNVERIFIED"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class PropertyStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    RENTED = "RENTED"
    UNDER_MAINTENANCE = "UNDER_MAINTENANCE"
    UNAVAILABLE = "UNAVAILABLE"


class PropertyType(str, enum.Enum):
    HOUSE = "HOUSE"
    APARTMENT = "APARTMENT"
    SHOP = "SHOP"
    OFFICE = "OFFICE"
    LAND = "LAND"
    WAREHOUSE = "WAREHOUSE"
    COMMERCIAL = "COMMERCIAL"
    INDUSTRIAL = "INDUSTRIAL"


class ListingType(str, enum.Enum):
    FOR_RENT = "FOR_RENT"
    FOR_SALE = "FOR_SALE"


class ComplaintStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)
POSTER_ROLES = (UserRole.LANDLORD, UserRole.AGENT, UserRole.ADMIN, UserRole.SUPER_ADMIN)
SELF_REGISTER_ROLES = (UserRole.CLIENT, UserRole.LANDLORD, UserRole.AGENT)


def is_admin_role(role) -> bool:
    """True for ADMIN and SUPER_ADMIN; accepts a UserRole or its string value"""
    return UserRole(role) in ADMIN_ROLES
