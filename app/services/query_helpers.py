"""
Correlated COUNT subqueries for per-row engagement figures.

Selecting these next to the entity gives the per-property / per-user counts
in a single round trip instead of loading the related collections.
"""
from sqlalchemy import select, func
from app.models import User, Property, Favorite, Rating, Complaint, PropertyView


def _count(model, fk_column, owner_column, label: str):
    return (
        select(func.count(model.id))
        .where(fk_column == owner_column)
        .correlate(owner_column.table)
        .scalar_subquery()
        .label(label)
    )


def property_engagement_columns():
    """views / favorites / ratings / complaints for each Property row"""
    return (
        _count(PropertyView, PropertyView.property_id, Property.id, "views"),
        _count(Favorite, Favorite.property_id, Property.id, "favorites"),
        _count(Rating, Rating.property_id, Property.id, "ratings"),
        _count(Complaint, Complaint.property_id, Property.id, "complaints"),
    )


def user_engagement_columns():
    """properties posted / ratings given / favorites added / complaints filed per User row"""
    return (
        _count(Property, Property.posted_by_id, User.id, "properties_posted"),
        _count(Rating, Rating.client_id, User.id, "ratings"),
        _count(Favorite, Favorite.user_id, User.id, "favorites"),
        _count(Complaint, Complaint.client_id, User.id, "complaints"),
    )


def counts_from_row(row, labels) -> dict:
    mapping = row._mapping
    return {label: mapping[label] for label in labels}


PROPERTY_COUNT_LABELS = ("views", "favorites", "ratings", "complaints")
USER_COUNT_LABELS = ("properties_posted", "ratings", "favorites", "complaints")
