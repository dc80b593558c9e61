"""
ORM row -> response dict conversion shared by the resource services.

Relationship attributes are only touched when the caller asked for them, so
the query that produced the row must have eager-loaded them.
"""
from typing import Optional
from app.models import User, Property, Rating, Complaint, UserVerification, AgentProfile
from app.utils.coercion import to_iso, to_money, to_int, enum_value


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "avatar_url": user.avatar_url,
        "role": enum_value(user.role),
        "is_email_verified": bool(user.is_email_verified),
        "verification_status": enum_value(user.verification_status),
        "created_at": to_iso(user.created_at),
        "last_login": to_iso(user.last_login),
    }


def person_summary(user: Optional[User]) -> Optional[dict]:
    """Public identity of a poster/agent/rater"""
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "avatar_url": user.avatar_url,
        "role": enum_value(user.role),
        "phone": user.phone,
    }


def verification_to_dict(verification: Optional[UserVerification]) -> Optional[dict]:
    if verification is None:
        return None
    return {
        "id": verification.id,
        "user_id": verification.user_id,
        "status": enum_value(verification.status),
        "document_url": verification.document_url,
        "status_reason": verification.status_reason,
        "submitted_at": to_iso(verification.submitted_at),
        "reviewed_at": to_iso(verification.reviewed_at),
        "reviewed_by": verification.reviewed_by,
    }


def agent_profile_to_dict(profile: Optional[AgentProfile]) -> Optional[dict]:
    if profile is None:
        return None
    return {
        "experience": profile.experience,
        "specialties": list(profile.specialties or []),
        "bio": profile.bio,
        "license_number": profile.license_number,
    }


def property_to_dict(
    prop: Property,
    counts: Optional[dict] = None,
    include_people: bool = False,
) -> dict:
    data = {
        "id": prop.id,
        "title": prop.title,
        "description": prop.description,
        "type": enum_value(prop.type),
        "listing_type": enum_value(prop.listing_type),
        "status": enum_value(prop.status),
        "price": to_money(prop.price),
        "currency": prop.currency,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "zip_code": prop.zip_code,
        "latitude": prop.latitude,
        "longitude": prop.longitude,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "area": prop.area,
        "year_built": prop.year_built,
        "image_urls": list(prop.image_urls or []),
        "video_urls": list(prop.video_urls or []),
        "amenities": list(prop.amenities or []),
        "is_featured": bool(prop.is_featured),
        "available_from": to_iso(prop.available_from),
        "posted_by_id": prop.posted_by_id,
        "managed_by_agent_id": prop.managed_by_agent_id,
        "created_at": to_iso(prop.created_at),
        "updated_at": to_iso(prop.updated_at),
    }
    if include_people:
        data["posted_by"] = person_summary(prop.posted_by)
        data["managed_by_agent"] = person_summary(prop.managed_by_agent)
    if counts is not None:
        data["counts"] = {key: to_int(value) for key, value in counts.items()}
    return data


def rating_to_dict(rating: Rating, include_client: bool = False) -> dict:
    data = {
        "id": rating.id,
        "property_id": rating.property_id,
        "client_id": rating.client_id,
        "rating": rating.rating,
        "comment": rating.comment,
        "created_at": to_iso(rating.created_at),
        "updated_at": to_iso(rating.updated_at),
    }
    if include_client:
        data["client"] = person_summary(rating.client)
    return data


def complaint_to_dict(complaint: Complaint, include_people: bool = False) -> dict:
    data = {
        "id": complaint.id,
        "client_id": complaint.client_id,
        "property_id": complaint.property_id,
        "subject": complaint.subject,
        "description": complaint.description,
        "status": enum_value(complaint.status),
        "resolution_notes": complaint.resolution_notes,
        "resolved_at": to_iso(complaint.resolved_at),
        "resolved_by": complaint.resolved_by,
        "created_at": to_iso(complaint.created_at),
        "updated_at": to_iso(complaint.updated_at),
    }
    if include_people:
        data["client"] = person_summary(complaint.client)
        data["property"] = (
            {"id": complaint.property.id, "title": complaint.property.title}
            if complaint.property else None
        )
    return data


def average_rating(values) -> float:
    """Mean star rating rounded to one decimal, 0 when there are none"""
    values = [v for v in values if v is not None]
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)
