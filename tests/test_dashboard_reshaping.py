"""
Test Case Suite: Dashboard Reshaping
Test ID Range: TC-101 to TC-121

Validates the pure functions that turn raw sub-query results into the admin
dashboard snapshot: enum completion, numeric/date coercion, trend grouping,
table projections and derived totals. No database is involved.
"""

import asyncio
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models.enums import UserRole, VerificationStatus, PropertyStatus, PropertyType, ListingType
from app.services.admin_dashboard_service import (
    isolate,
    complete_enum_counts,
    build_trend,
    display_name,
    project_user_row,
    project_property_row,
    project_top_property,
    project_engagement,
    build_dashboard_snapshot,
)
from app.utils.coercion import to_int, to_money, to_iso, utc_date_key


def empty_results() -> dict:
    """Every sub-query at its failure default"""
    return {
        "users_by_role": [],
        "users_by_verification_status": [],
        "properties_by_status": [],
        "properties_by_type": [],
        "properties_by_listing_type": [],
        "pending_verifications": 0,
        "pending_complaints": 0,
        "total_ratings": 0,
        "total_favorites": 0,
        "total_views": 0,
        "new_users": 0,
        "recent_users": [],
        "average_price": None,
        "user_creation_times": [],
        "property_creation_times": [],
        "user_engagement": [],
        "property_table": [],
        "top_properties": [],
        "user_table": [],
    }


def fake_user(**overrides):
    values = dict(
        id="u1",
        first_name="Ada",
        last_name="Obi",
        email="ada@estately.io",
        phone=None,
        role=UserRole.AGENT,
        verification_status=VerificationStatus.VERIFIED,
        is_email_verified=True,
        last_login=None,
        created_at=datetime(2026, 3, 1, 9, 30),
        avatar_url=None,
        agent_profile=SimpleNamespace(experience=4, specialties=["Residential"]),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def fake_property(**overrides):
    values = dict(
        id="p1",
        title="Lekki duplex",
        type=PropertyType.HOUSE,
        listing_type=ListingType.FOR_SALE,
        status=PropertyStatus.AVAILABLE,
        price=Decimal("250000000.00"),
        currency="NGN",
        city="Lagos",
        state="Lagos",
        address="5 Admiralty Road",
        bedrooms=4,
        bathrooms=5,
        area=420.0,
        year_built=2019,
        image_urls=["https://img.example.org/a.jpg"],
        video_urls=None,
        amenities=["Pool"],
        posted_by=SimpleNamespace(id="u9", first_name="Kemi", last_name="Bello", email="kemi@estately.io", phone="0801"),
        managed_by_agent=None,
        created_at=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
        updated_at=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc),
        available_from=None,
        is_featured=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestEnumCompletion:
    """
    Test Case TC-101: Sparse grouped counts are zero-filled
    Expected Result: every enum member present, missing ones 0
    """
    def test_tc101_zero_fills_missing_categories(self):
        """TC-101: Missing categories default to zero"""
        counts = complete_enum_counts([(UserRole.CLIENT, 2), ("AGENT", 1)], UserRole)

        assert counts == {"CLIENT": 2, "LANDLORD": 0, "AGENT": 1, "ADMIN": 0, "SUPER_ADMIN": 0}

    """
    Test Case TC-102: Unknown and null keys are ignored
    Expected Result: key set equals the enum exactly
    """
    def test_tc102_ignores_unknown_and_null_keys(self):
        """TC-102: Never invent a category"""
        counts = complete_enum_counts([("PENTHOUSE", 3), (None, 7), ("LAND", 2)], PropertyType)

        assert set(counts) == {member.value for member in PropertyType}
        assert counts["LAND"] == 2
        assert sum(counts.values()) == 2

    """
    Test Case TC-103: Failed sub-query default still yields a complete mapping
    """
    @pytest.mark.parametrize("enum_cls", [UserRole, VerificationStatus, PropertyStatus, PropertyType, ListingType])
    def test_tc103_none_rows_give_complete_zero_mapping(self, enum_cls):
        """TC-103: None input is handled"""
        counts = complete_enum_counts(None, enum_cls)

        assert set(counts) == {member.value for member in enum_cls}
        assert all(value == 0 for value in counts.values())

    """
    Test Case TC-104: 64-bit / Decimal counts are converted to int
    """
    def test_tc104_coerces_count_types(self):
        """TC-104: Counts arrive as Decimal or strings"""
        counts = complete_enum_counts([("FOR_RENT", Decimal("5")), ("FOR_SALE", "3")], ListingType)

        assert counts == {"FOR_RENT": 5, "FOR_SALE": 3}
        assert all(type(value) is int for value in counts.values())


class TestCoercion:
    """
    Test Case TC-105: Numeric coercion is total and null-safe
    """
    def test_tc105_to_int(self):
        """TC-105: to_int never raises"""
        assert to_int(None) == 0
        assert to_int(7) == 7
        assert to_int(Decimal("12")) == 12
        assert to_int("42") == 42
        assert to_int("not a number") == 0
        assert to_int(float("inf")) == 0
        assert to_int(Decimal("-Infinity")) == 0
        assert to_int(float("nan")) == 0

    """
    Test Case TC-106: Money is rounded half-up to 2 places and returned as float
    """
    def test_tc106_to_money(self):
        """TC-106: Decimal averages become 2dp floats"""
        assert to_money(None) == 0
        assert to_money(Decimal("1234.565")) == 1234.57
        assert to_money(Decimal("0.005")) == 0.01
        assert to_money(1500000.0) == 1500000.0
        assert to_money(float("nan")) == 0
        assert isinstance(to_money(Decimal("10")), float)

    """
    Test Case TC-107: Timestamps are serialized as ISO-8601, naive treated as UTC
    """
    def test_tc107_to_iso(self):
        """TC-107: Canonical timestamp text"""
        assert to_iso(None) is None
        assert to_iso(datetime(2026, 1, 5, 10, 0)) == "2026-01-05T10:00:00+00:00"
        lagos = timezone(timedelta(hours=1))
        assert to_iso(datetime(2026, 1, 5, 10, 0, tzinfo=lagos)) == "2026-01-05T09:00:00+00:00"

    """
    Test Case TC-108: Date keys are UTC calendar dates
    """
    def test_tc108_utc_date_key(self):
        """TC-108: 00:30 in Lagos is still the previous UTC day"""
        lagos = timezone(timedelta(hours=1))
        assert utc_date_key(datetime(2026, 2, 10, 0, 30, tzinfo=lagos)) == "2026-02-09"


class TestTrends:
    """
    Test Case TC-109: Same-day timestamps collapse into one bucket
    Expected Result: ascending dates, no duplicates
    """
    def test_tc109_groups_by_day_ascending(self):
        """TC-109: Two on D1 and one on D2"""
        d1 = datetime(2026, 4, 2, 9, 0, tzinfo=timezone.utc)
        d2 = datetime(2026, 4, 3, 18, 0, tzinfo=timezone.utc)

        trend = build_trend([d2, d1, d1.replace(hour=23)])

        assert trend == [{"date": "2026-04-02", "count": 2}, {"date": "2026-04-03", "count": 1}]

    """
    Test Case TC-110: Empty or missing input gives an empty trend
    """
    def test_tc110_empty_trend(self):
        """TC-110: No data"""
        assert build_trend([]) == []
        assert build_trend(None) == []

    """
    Test Case TC-111: Trend dates are unique and sorted for unordered input
    """
    def test_tc111_unique_sorted_dates(self):
        """TC-111: Ordering holds for scattered input"""
        base = datetime(2026, 5, 1, tzinfo=timezone.utc)
        stamps = [base + timedelta(days=offset, hours=offset) for offset in (5, 1, 3, 1, 5, 0)]

        dates = [point["date"] for point in build_trend(stamps)]

        assert dates == sorted(set(dates))
        assert len(dates) == 4


class TestProjections:
    """
    Test Case TC-112: Display names skip missing parts
    """
    def test_tc112_display_name(self):
        """TC-112: First + last, N/A when both missing"""
        assert display_name("Ada", "Obi") == "Ada Obi"
        assert display_name("Ada", None) == "Ada"
        assert display_name(None, "  ") == "N/A"

    """
    Test Case TC-113: User table row flattens identity, profile and counts
    """
    def test_tc113_user_row(self):
        """TC-113: Agent with profile"""
        row = project_user_row(
            fake_user(),
            {"properties_posted": 3, "ratings": Decimal("2"), "favorites": None, "complaints": 1},
        )

        assert row["name"] == "Ada Obi"
        assert row["role"] == "AGENT"
        assert row["join_date"] == "2026-03-01T09:30:00+00:00"
        assert row["last_login"] is None
        assert row["properties_count"] == 3
        assert row["reviews_count"] == 2
        assert row["favorites_count"] == 0
        assert row["experience"] == 4
        assert row["specialties"] == ["Residential"]

    """
    Test Case TC-114: User row without agent profile or email
    """
    def test_tc114_user_row_without_profile(self):
        """TC-114: Client without agent profile"""
        row = project_user_row(fake_user(agent_profile=None, email=None, role=UserRole.CLIENT), {})

        assert row["email"] == "N/A"
        assert row["experience"] is None
        assert row["specialties"] == []

    """
    Test Case TC-115: Property rows carry location, poster and engagement counts
    """
    def test_tc115_property_rows(self):
        """TC-115: Property table and top-property projections"""
        counts = {"views": 10, "favorites": 4, "ratings": 2, "complaints": 0}

        row = project_property_row(fake_property(), counts)
        top = project_top_property(fake_property(), counts)

        assert row["location"] == "Lagos, Lagos"
        assert row["price"] == 250000000.0
        assert row["posted_by"] == "Kemi Bello"
        assert row["posted_by_id"] == "u9"
        assert row["managed_by"] == "N/A"
        assert row["managed_by_id"] is None
        assert row["video_urls"] == []
        assert row["views"] == 10
        assert top["posted_by_email"] == "kemi@estately.io"
        assert top["favorites"] == 4
        assert "complaints" not in top

    """
    Test Case TC-116: Engagement entries rename the count fields
    """
    def test_tc116_engagement(self):
        """TC-116: Engagement projection"""
        entry = project_engagement({
            "id": "u1",
            "role": UserRole.CLIENT,
            "last_login": datetime(2026, 1, 1, tzinfo=timezone.utc),
            "counts": {"properties_posted": 0, "ratings": 5, "favorites": 2, "complaints": 1},
        })

        assert entry == {
            "user_id": "u1",
            "role": "CLIENT",
            "last_active": "2026-01-01T00:00:00+00:00",
            "properties_posted": 0,
            "reviews_given": 5,
            "favorites_added": 2,
            "complaints_filed": 1,
        }


class TestSnapshotAssembly:
    """
    Test Case TC-117: All-default input yields a complete zeroed snapshot
    Expected Result: totals 0, average price 0 (not None), complete breakdowns
    """
    def test_tc117_all_defaults(self):
        """TC-117: Every sub-query failed"""
        snapshot = build_dashboard_snapshot(empty_results())

        users = snapshot["user_metrics"]
        props = snapshot["property_metrics"]
        assert users["total_users"] == 0
        assert users["total_non_admin_users"] == 0
        assert set(users["by_role"]) == {r.value for r in UserRole}
        assert set(props["by_listing_type"]) == {"FOR_RENT", "FOR_SALE"}
        assert props["average_price"] == 0
        assert props["average_price"] is not None
        assert snapshot["system_health"] == {"pending_verifications": 0, "pending_complaints": 0}
        assert snapshot["recent_activity"] == {"recent_users": [], "recent_properties": []}
        assert snapshot["analytics"]["user_growth"] == []

    """
    Test Case TC-118: Totals are derived from the completed breakdowns
    """
    def test_tc118_derived_totals(self):
        """TC-118: total = sum(byRole), non-admin = total - ADMIN, properties = sum(byStatus)"""
        results = empty_results()
        results["users_by_role"] = [("CLIENT", 4), ("ADMIN", 2), ("AGENT", 1), ("MODERATOR", 9)]
        results["properties_by_status"] = [("AVAILABLE", 3), ("RENTED", 2)]
        results["average_price"] = Decimal("333.335")
        results["property_table"] = [(fake_property(id=f"p{i}"), {}) for i in range(7)]

        snapshot = build_dashboard_snapshot(results)

        users = snapshot["user_metrics"]
        assert users["total_users"] == sum(users["by_role"].values()) == 7
        assert users["total_non_admin_users"] == users["total_users"] - users["by_role"]["ADMIN"] == 5
        assert snapshot["property_metrics"]["total_properties"] == 5
        assert snapshot["property_metrics"]["average_price"] == 333.34
        assert len(snapshot["recent_activity"]["recent_properties"]) == 5
        assert snapshot["recent_activity"]["recent_properties"][0]["id"] == "p0"


class TestIsolation:
    """
    Test Case TC-119: A failing sub-query yields a private copy of its default
    """
    def test_tc119_isolate_returns_default_copy(self):
        """TC-119: Defaults are never shared between calls"""
        async def boom():
            raise RuntimeError("connection reset")

        default = []
        result = asyncio.run(isolate("explodes", boom(), default))

        assert result == []
        assert result is not default

    """
    Test Case TC-120: Successful sub-queries pass their value through
    """
    def test_tc120_isolate_passes_value_through(self):
        """TC-120: No interference on success"""
        async def ok():
            return 42

        assert asyncio.run(isolate("ok", ok(), 0)) == 42

    """
    Test Case TC-121: Cancellation is not swallowed
    """
    def test_tc121_isolate_does_not_swallow_cancellation(self):
        """TC-121: CancelledError propagates"""
        async def cancelled():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(isolate("cancelled", cancelled(), 0))
