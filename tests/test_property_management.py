"""
Test Case Suite: Property Management Module
Test ID Range: TC-021 to TC-036

This test suite validates listing creation, public search, listing detail with
view tracking, updates, deletion and similar-listing lookups.
"""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from app.controllers import property_controller
from app.models import Property, PropertyView, Favorite
from app.models.enums import UserRole, PropertyStatus, PropertyType, ListingType


def listing_form(**overrides) -> dict:
    form = {
        "title": "Serviced 3 bedroom apartment",
        "description": "Fully serviced apartment with 24 hour power",
        "type": "APARTMENT",
        "listingType": "FOR_RENT",
        "price": "4500000",
        "address": "7 Bourdillon Road",
        "city": "Ikoyi",
        "state": "Lagos",
        "bedrooms": "3",
        "bathrooms": "3",
        "amenities": ["Pool", "Gym"],
        "imageUrls": ["https://img.example.org/ikoyi.jpg"],
    }
    form.update(overrides)
    return form


class TestPropertyCreation:
    """
    Test Case TC-021: Landlord creates a listing
    Description: Multipart form with hosted image URLs
    Expected Result: 201, AVAILABLE, poster set, not featured
    """
    @pytest.mark.asyncio
    async def test_tc021_create_property(self, authenticated_landlord):
        """TC-021: Create property"""
        client, landlord = authenticated_landlord

        response = await client.post("/api/properties", data=listing_form(isFeatured="true"))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Property created successfully"
        data = body["data"]
        assert data["status"] == "AVAILABLE"
        assert data["postedById"] == landlord.id
        assert data["postedBy"]["id"] == landlord.id
        assert data["price"] == 4500000.0
        assert data["amenities"] == ["Pool", "Gym"]
        assert data["isFeatured"] is False
        assert data["managedByAgentId"] is None

    """
    Test Case TC-022: Agent listings are managed by the agent by default
    """
    @pytest.mark.asyncio
    async def test_tc022_agent_manages_own_listing(self, client: AsyncClient, make_user, login_as):
        """TC-022: Agent poster"""
        agent = await make_user(UserRole.AGENT)

        response = await client.post("/api/properties", data=listing_form(), headers=await login_as(agent))

        assert response.status_code == 201
        assert response.json()["data"]["managedByAgentId"] == agent.id

    """
    Test Case TC-023: Clients cannot create listings
    Expected Result: 403
    """
    @pytest.mark.asyncio
    async def test_tc023_client_cannot_create(self, authenticated_client_user):
        """TC-023: Role check"""
        client, _ = authenticated_client_user

        response = await client.post("/api/properties", data=listing_form())

        assert response.status_code == 403

    """
    Test Case TC-024: A listing needs at least one image and valid enums
    Expected Result: 400
    """
    @pytest.mark.asyncio
    async def test_tc024_create_validation(self, authenticated_landlord):
        """TC-024: Missing image, bad type, negative price"""
        client, _ = authenticated_landlord
        no_images = listing_form()
        no_images.pop("imageUrls")

        missing_image = await client.post("/api/properties", data=no_images)
        bad_type = await client.post("/api/properties", data=listing_form(type="CASTLE"))
        negative = await client.post("/api/properties", data=listing_form(price="-5"))

        assert missing_image.status_code == 400
        assert "image" in missing_image.json()["detail"].lower()
        assert bad_type.status_code == 400
        assert negative.status_code == 400

    """
    Test Case TC-025: Uploaded images are stored as Cloudinary URLs
    """
    @pytest.mark.asyncio
    async def test_tc025_image_upload(self, authenticated_landlord, monkeypatch):
        """TC-025: Multipart file upload"""
        client, _ = authenticated_landlord
        uploaded = []

        def fake_upload(file_content, file_name, folder=None):
            uploaded.append(file_name)
            return f"https://res.cloudinary.com/estately/{file_name}"

        monkeypatch.setattr(property_controller, "upload_image_to_cloudinary", fake_upload)
        form = listing_form()
        form.pop("imageUrls")

        response = await client.post(
            "/api/properties",
            data=form,
            files=[("images", ("front.jpg", b"\xff\xd8\xff-jpeg-bytes", "image/jpeg"))],
        )

        assert response.status_code == 201
        assert uploaded == ["front.jpg"]
        assert response.json()["data"]["imageUrls"] == ["https://res.cloudinary.com/estately/front.jpg"]


class TestPropertySearch:
    """
    Test Case TC-026: Public search only returns AVAILABLE listings
    """
    @pytest.mark.asyncio
    async def test_tc026_search_available_only(self, client: AsyncClient, make_user, make_property):
        """TC-026: Status filter"""
        landlord = await make_user(UserRole.LANDLORD)
        await make_property(landlord)
        await make_property(landlord, status=PropertyStatus.RENTED)

        response = await client.get("/api/properties")

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 1, "limit": 10, "page": 1, "totalPages": 1}
        assert body["data"][0]["status"] == "AVAILABLE"

    """
    Test Case TC-027: Filters combine
    """
    @pytest.mark.asyncio
    async def test_tc027_search_filters(self, client: AsyncClient, make_user, make_property):
        """TC-027: City, price range, bedrooms, amenities and free text"""
        landlord = await make_user(UserRole.LANDLORD)
        target = await make_property(
            landlord,
            title="Garden terrace in Lekki",
            city="Lekki",
            price=2000000,
            bedrooms=3,
            amenities=["Pool", "Garden"],
        )
        await make_property(landlord, city="Lekki", price=9000000, bedrooms=3, amenities=["Pool"])
        await make_property(landlord, city="Yaba", price=2000000, bedrooms=3, amenities=["Garden"])
        await make_property(landlord, city="Lekki", price=2000000, bedrooms=1, amenities=["Garden"])

        filtered = await client.get("/api/properties", params={
            "city": "lekki",
            "minPrice": 1000000,
            "maxPrice": 3000000,
            "bedrooms": 2,
            "amenities": "Garden,Sauna",
        })
        by_text = await client.get("/api/properties", params={"search": "terrace"})

        assert [p["id"] for p in filtered.json()["data"]] == [target.id]
        assert [p["id"] for p in by_text.json()["data"]] == [target.id]

    """
    Test Case TC-028: Sorting and pagination
    """
    @pytest.mark.asyncio
    async def test_tc028_sort_and_paginate(self, client: AsyncClient, make_user, make_property):
        """TC-028: Price ascending, page 2 of 3"""
        landlord = await make_user(UserRole.LANDLORD)
        for price in (500000, 300000, 100000, 400000, 200000):
            await make_property(landlord, price=price)

        response = await client.get("/api/properties", params={
            "sortBy": "price", "sortOrder": "asc", "limit": 2, "page": 2,
        })

        body = response.json()
        assert [p["price"] for p in body["data"]] == [300000.0, 400000.0]
        assert body["pagination"]["totalPages"] == 3

    """
    Test Case TC-029: Invalid enum filter is rejected
    """
    @pytest.mark.asyncio
    async def test_tc029_invalid_filter(self, client: AsyncClient):
        """TC-029: Unknown listing type"""
        response = await client.get("/api/properties", params={"listingType": "FOR_SWAP"})

        assert response.status_code == 400

    """
    Test Case TC-030: userId selects one poster's listings in any status
    """
    @pytest.mark.asyncio
    async def test_tc030_search_by_poster(self, client: AsyncClient, make_user, make_property):
        """TC-030: Poster page"""
        landlord = await make_user(UserRole.LANDLORD)
        other = await make_user(UserRole.LANDLORD)
        await make_property(landlord, status=PropertyStatus.UNDER_MAINTENANCE)
        await make_property(other)

        response = await client.get("/api/properties", params={"userId": landlord.id})

        assert response.json()["pagination"]["total"] == 1
        assert response.json()["data"][0]["postedById"] == landlord.id


class TestPropertyDetail:
    """
    Test Case TC-031: Detail view includes ratings and records one view per viewer
    """
    @pytest.mark.asyncio
    async def test_tc031_detail_and_view_dedup(self, client: AsyncClient, make_user, make_property, db_session):
        """TC-031: Repeated anonymous views from one IP are counted once"""
        landlord = await make_user(UserRole.LANDLORD)
        prop = await make_property(landlord)

        first = await client.get(f"/api/properties/{prop.id}")
        second = await client.get(f"/api/properties/{prop.id}")
        untracked = await client.get(f"/api/properties/{prop.id}", params={"trackView": "false"})

        assert first.status_code == 200
        data = second.json()["data"]
        assert data["ratings"] == []
        assert data["averageRating"] == 0
        assert data["totalRatings"] == 0
        assert untracked.json()["data"]["counts"]["views"] == 1

        views = (await db_session.execute(
            select(func.count(PropertyView.id)).where(PropertyView.property_id == prop.id)
        )).scalar()
        assert views == 1

    """
    Test Case TC-032: Unknown listing
    """
    @pytest.mark.asyncio
    async def test_tc032_detail_not_found(self, client: AsyncClient):
        """TC-032: 404"""
        response = await client.get(f"/api/properties/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Property not found"


class TestPropertyUpdateDelete:
    """
    Test Case TC-033: Poster updates own listing
    """
    @pytest.mark.asyncio
    async def test_tc033_update_own_listing(self, authenticated_landlord, make_property):
        """TC-033: Price and status change"""
        client, landlord = authenticated_landlord
        prop = await make_property(landlord)

        response = await client.put(f"/api/properties/{prop.id}", json={"price": 1750000, "status": "RENTED"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 1750000.0
        assert data["status"] == "RENTED"

    """
    Test Case TC-034: Update permissions
    Expected Result: stranger 403, featured flag admin-only, empty title 400
    """
    @pytest.mark.asyncio
    async def test_tc034_update_permissions(self, authenticated_landlord, make_user, make_property, login_as):
        """TC-034: Update rules"""
        client, landlord = authenticated_landlord
        stranger = await make_user(UserRole.LANDLORD)
        admin = await make_user(UserRole.ADMIN)
        prop = await make_property(landlord)

        by_stranger = await client.put(
            f"/api/properties/{prop.id}", json={"title": "Mine now"}, headers=await login_as(stranger)
        )
        feature_self = await client.put(f"/api/properties/{prop.id}", json={"isFeatured": True})
        empty_title = await client.put(f"/api/properties/{prop.id}", json={"title": None})
        feature_admin = await client.put(
            f"/api/properties/{prop.id}", json={"isFeatured": True}, headers=await login_as(admin)
        )

        assert by_stranger.status_code == 403
        assert feature_self.status_code == 403
        assert empty_title.status_code == 400
        assert feature_admin.status_code == 200
        assert feature_admin.json()["data"]["isFeatured"] is True

    """
    Test Case TC-035: Deleting a listing removes its engagement records
    """
    @pytest.mark.asyncio
    async def test_tc035_delete_cascades(self, authenticated_landlord, make_user, make_property, db_session, login_as):
        """TC-035: Delete"""
        client, landlord = authenticated_landlord
        renter = await make_user(UserRole.CLIENT)
        prop = await make_property(landlord)
        db_session.add(Favorite(id=str(uuid.uuid4()), user_id=renter.id, property_id=prop.id))
        await db_session.commit()

        by_renter = await client.delete(f"/api/properties/{prop.id}", headers=await login_as(renter))
        response = await client.delete(f"/api/properties/{prop.id}")
        again = await client.delete(f"/api/properties/{prop.id}")

        assert by_renter.status_code == 403
        assert response.status_code == 200
        assert again.status_code == 404
        remaining = (await db_session.execute(select(func.count(Favorite.id)))).scalar()
        assert remaining == 0
        db_session.expire_all()
        assert (await db_session.execute(select(Property).where(Property.id == prop.id))).first() is None


class TestSimilarProperties:
    """
    Test Case TC-036: Similar listings share type, listing type and city within the price band
    """
    @pytest.mark.asyncio
    async def test_tc036_similar(self, client: AsyncClient, make_user, make_property):
        """TC-036: Similar listings"""
        landlord = await make_user(UserRole.LANDLORD)
        base = await make_property(landlord, price=1000000)
        close = await make_property(landlord, price=1200000)
        await make_property(landlord, price=1500000)
        await make_property(landlord, price=1100000, city="Abuja")
        await make_property(landlord, price=1100000, type=PropertyType.HOUSE)
        await make_property(landlord, price=1100000, listing_type=ListingType.FOR_SALE)
        await make_property(landlord, price=900000, status=PropertyStatus.RENTED)

        response = await client.get(f"/api/properties/{base.id}/similar")
        missing = await client.get(f"/api/properties/{uuid.uuid4()}/similar")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]] == [close.id]
        assert missing.status_code == 404
