"""
Tests for profile endpoints.

These tests cover:
- Profile creation and username rules
- Reading and updating the caller's profile
- Follows and image visibility of private profiles
"""

import pytest
from httpx import AsyncClient


@pytest.mark.api
class TestCreateProfile:
    """Tests for POST /api/v1/profiles."""

    async def test_create_profile(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/profiles",
            json={"username": "Mika_R", "name": "Mika R", "age": 25, "city": "Turku"},
            headers=auth_headers("idp-mika"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user_id"] == "idp-mika"
        assert data["username"] == "mika_r"
        assert data["email"] == "idp-mika@example.com"
        assert data["city"] == "Turku"
        assert data["is_public"] is False
        assert data["badge_rank"] is None
        assert data["created_at"].endswith("Z")

    async def test_username_taken_ignoring_case(self, client: AsyncClient, make_profile, auth_headers):
        await make_profile(username="mika_r")

        response = await client.post(
            "/api/v1/profiles",
            json={"username": "MIKA_R", "name": "Other Mika", "age": 40},
            headers=auth_headers("idp-other"),
        )

        assert response.status_code == 409

    async def test_second_profile_rejected(self, client: AsyncClient, make_profile, auth_headers):
        existing = await make_profile()

        response = await client.post(
            "/api/v1/profiles",
            json={"username": "fresh_name", "name": "Fresh", "age": 40},
            headers=auth_headers(existing),
        )

        assert response.status_code == 409

    async def test_underage_rejected(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/profiles",
            json={"username": "young_one", "name": "Young", "age": 12},
            headers=auth_headers("idp-young"),
        )

        assert response.status_code == 422

    async def test_requires_token(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/profiles", json={"username": "anon_user", "name": "Anon", "age": 30}
        )

        assert response.status_code == 401


@pytest.mark.api
class TestUsernameCheck:
    """Tests for GET /api/v1/profiles/check-username."""

    async def test_available(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/check-username", params={"username": "Free_Name"})

        assert response.json() == {"username": "free_name", "available": True}

    async def test_taken(self, client: AsyncClient, make_profile):
        await make_profile(username="taken_name")

        response = await client.get("/api/v1/profiles/check-username", params={"username": "Taken_Name"})

        assert response.json()["available"] is False

    async def test_invalid(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/check-username", params={"username": "x"})

        assert response.status_code == 422


@pytest.mark.api
class TestMyProfile:
    """Tests for /api/v1/profiles/me."""

    async def test_get_me_includes_email(self, client: AsyncClient, make_profile, auth_headers):
        me = await make_profile()

        response = await client.get("/api/v1/profiles/me", headers=auth_headers(me))

        assert response.status_code == 200
        assert response.json()["email"] == me.email

    async def test_public_profile_hides_email(self, client: AsyncClient, make_profile):
        someone = await make_profile()

        response = await client.get(f"/api/v1/profiles/{someone.user_id}")

        assert response.status_code == 200
        assert "email" not in response.json()

    async def test_unknown_profile(self, client: AsyncClient):
        response = await client.get("/api/v1/profiles/nobody")

        assert response.status_code == 404

    async def test_update_me(self, client: AsyncClient, make_profile, auth_headers):
        me = await make_profile(city="Turku", country="Finland")

        response = await client.patch(
            "/api/v1/profiles/me", json={"city": "Espoo", "name": "New Name"}, headers=auth_headers(me)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["city"] == "Espoo"
        assert data["country"] == "Finland"
        assert data["name"] == "New Name"

    async def test_update_to_taken_username(self, client: AsyncClient, make_profile, auth_headers):
        await make_profile(username="already_here")
        me = await make_profile()

        response = await client.patch(
            "/api/v1/profiles/me", json={"username": "Already_Here"}, headers=auth_headers(me)
        )

        assert response.status_code == 409

    async def test_make_public(self, client: AsyncClient, make_profile, auth_headers):
        me = await make_profile()

        response = await client.post("/api/v1/profiles/me/public", headers=auth_headers(me))

        assert response.status_code == 200
        assert response.json()["is_public"] is True


@pytest.mark.api
class TestFollow:
    """Tests for POST/DELETE /api/v1/profiles/{user_id}/follow."""

    async def test_follow_and_unfollow(self, client: AsyncClient, make_profile, auth_headers):
        me = await make_profile()
        them = await make_profile()
        url = f"/api/v1/profiles/{them.user_id}/follow"

        response = await client.post(url, headers=auth_headers(me))
        assert response.status_code == 201
        assert response.json() == {
            "follower_id": me.user_id,
            "following_id": them.user_id,
            "following": True,
            "followers_count": 1,
        }

        response = await client.delete(url, headers=auth_headers(me))
        assert response.status_code == 200
        assert response.json()["following"] is False
        assert response.json()["followers_count"] == 0

    async def test_follow_errors(self, client: AsyncClient, make_profile, auth_headers):
        me = await make_profile()
        them = await make_profile()
        await client.post(f"/api/v1/profiles/{them.user_id}/follow", headers=auth_headers(me))

        duplicate = await client.post(f"/api/v1/profiles/{them.user_id}/follow", headers=auth_headers(me))
        self_follow = await client.post(f"/api/v1/profiles/{me.user_id}/follow", headers=auth_headers(me))
        missing = await client.post("/api/v1/profiles/ghost/follow", headers=auth_headers(me))
        not_following = await client.delete(f"/api/v1/profiles/{me.user_id}/follow", headers=auth_headers(them))

        assert duplicate.status_code == 409
        assert self_follow.status_code == 400
        assert missing.status_code == 404
        assert not_following.status_code == 404


@pytest.mark.api
class TestProfileImages:
    """Tests for GET /api/v1/profiles/{user_id}/images."""

    async def test_public_profile_images(self, client: AsyncClient, make_profile, make_image):
        owner = await make_profile(is_public=True)
        await make_image(owner)
        await make_image(owner)

        response = await client.get(f"/api/v1/profiles/{owner.user_id}/images")

        assert response.status_code == 200
        assert response.json()["total"] == 2

    async def test_private_profile_needs_follow(
        self, client: AsyncClient, make_profile, make_image, auth_headers
    ):
        owner = await make_profile()
        viewer = await make_profile()
        await make_image(owner)
        url = f"/api/v1/profiles/{owner.user_id}/images"

        assert (await client.get(url)).status_code == 403
        assert (await client.get(url, headers=auth_headers(viewer))).status_code == 403
        assert (await client.get(url, headers=auth_headers(owner))).status_code == 200

        await client.post(f"/api/v1/profiles/{owner.user_id}/follow", headers=auth_headers(viewer))
        response = await client.get(url, headers=auth_headers(viewer))

        assert response.status_code == 200
        assert response.json()["total"] == 1
