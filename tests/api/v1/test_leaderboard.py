"""
Tests for leaderboard and explore endpoints.

These tests cover:
- GET /api/v1/leaderboard (scoping, ordering, streaks, validation)
- GET /api/v1/leaderboard/users
- GET /api/v1/images/explore
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models import Streaks


@pytest.mark.api
class TestLeaderboard:
    """Tests for GET /api/v1/leaderboard."""

    async def test_anonymous_board_is_global(self, client: AsyncClient, make_profile, make_image):
        oslo = await make_profile(city="Oslo")
        lima = await make_profile(city="Lima")
        c = await make_image(oslo, average_rating=7.0, total_ratings=10)
        b = await make_image(lima, average_rating=9.0, total_ratings=3)
        a = await make_image(oslo, average_rating=9.0, total_ratings=5)
        await make_image(lima)

        response = await client.get("/api/v1/leaderboard", params={"granularity": "city"})

        assert response.status_code == 200
        data = response.json()
        assert data["scope"] == {"granularity": "city", "location_value": None, "constrained": False}
        assert data["top"] == 10
        assert [entry["image"]["image_id"] for entry in data["entries"]] == [
            a.image_id,
            b.image_id,
            c.image_id,
        ]
        assert [entry["rank"] for entry in data["entries"]] == [1, 2, 3]
        assert data["entries"][1]["owner"]["user_id"] == lima.user_id
        assert all(entry["current_streak"] == 1 for entry in data["entries"])

    async def test_viewer_sees_own_region(
        self, client: AsyncClient, make_profile, make_image, auth_headers
    ):
        viewer = await make_profile(country="Peru", city="Lima")
        neighbour = await make_profile(country="Peru", city="Cusco")
        foreigner = await make_profile(country="Chile", city="Lima")
        peru_image = await make_image(neighbour, average_rating=5.0, total_ratings=1)
        await make_image(foreigner, average_rating=10.0, total_ratings=1)

        response = await client.get(
            "/api/v1/leaderboard", params={"granularity": "country"}, headers=auth_headers(viewer)
        )

        data = response.json()
        assert data["scope"] == {"granularity": "country", "location_value": "Peru", "constrained": True}
        assert [entry["image"]["image_id"] for entry in data["entries"]] == [peru_image.image_id]

    async def test_streak_rows_are_committed(self, client: AsyncClient, db_session, make_profile, make_image):
        image = await make_image(await make_profile(), average_rating=6.0, total_ratings=1)

        await client.get("/api/v1/leaderboard", params={"granularity": "state"})
        await client.get("/api/v1/leaderboard", params={"granularity": "state"})

        result = await db_session.execute(select(Streaks).where(Streaks.image_id == image.image_id))
        streak = result.scalar_one()
        assert streak.streak_type == "state"
        assert streak.location_value == "global"
        assert streak.current_streak == 1

    async def test_defaults(self, client: AsyncClient):
        response = await client.get("/api/v1/leaderboard")

        assert response.status_code == 200
        assert response.json()["scope"]["granularity"] == "continent"
        assert response.json()["entries"] == []

    async def test_unknown_granularity(self, client: AsyncClient):
        response = await client.get("/api/v1/leaderboard", params={"granularity": "planet"})

        assert response.status_code == 422

    async def test_top_must_be_allowed_value(self, client: AsyncClient):
        response = await client.get("/api/v1/leaderboard", params={"top": 25})

        assert response.status_code == 422

    async def test_top_truncates(self, client: AsyncClient, make_profile, make_image):
        owner = await make_profile()
        for n in range(12):
            await make_image(owner, average_rating=float(n % 10), total_ratings=n + 1)

        response = await client.get("/api/v1/leaderboard", params={"top": 10})

        assert len(response.json()["entries"]) == 10


@pytest.mark.api
class TestUserStandings:
    """Tests for GET /api/v1/leaderboard/users."""

    async def test_ranks_profiles_with_ratings(self, client: AsyncClient, make_profile):
        second = await make_profile(average_rating=8.0, total_ratings_received=3)
        first = await make_profile(average_rating=8.0, total_ratings_received=9)
        await make_profile()

        response = await client.get("/api/v1/leaderboard/users")

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [entry["profile"]["user_id"] for entry in entries] == [first.user_id, second.user_id]
        assert entries[0]["rank"] == 1
        assert entries[0]["total_ratings_received"] == 9

    async def test_limit_bounds(self, client: AsyncClient):
        response = await client.get("/api/v1/leaderboard/users", params={"limit": 0})

        assert response.status_code == 422


@pytest.mark.api
class TestExplore:
    """Tests for GET /api/v1/images/explore."""

    async def test_explore_includes_unrated_and_own_scores(
        self, client: AsyncClient, make_profile, make_image, auth_headers
    ):
        viewer = await make_profile()
        owner = await make_profile()
        rated = await make_image(owner)
        unrated = await make_image(owner)
        await client.post(
            f"/api/v1/images/{rated.image_id}/rating", json={"rating": 9}, headers=auth_headers(viewer)
        )

        response = await client.get("/api/v1/images/explore", headers=auth_headers(viewer))

        assert response.status_code == 200
        entries = response.json()["entries"]
        assert [entry["image"]["image_id"] for entry in entries] == [rated.image_id, unrated.image_id]
        assert [entry["user_rating"] for entry in entries] == [9, None]

    async def test_explore_anonymous(self, client: AsyncClient, make_profile, make_image):
        await make_image(await make_profile())

        response = await client.get("/api/v1/images/explore", params={"granularity": "city"})

        assert response.status_code == 200
        assert response.json()["scope"]["constrained"] is False
        assert response.json()["entries"][0]["user_rating"] is None
