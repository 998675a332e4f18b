"""
Tests for image endpoints.

These tests cover:
- POST /api/v1/images/upload (validation, storage, AI detection)
- GET /api/v1/images/{image_id}
- DELETE /api/v1/images/{image_id}
"""

import io

import pytest
from httpx import AsyncClient
from PIL import Image
from sqlalchemy import func, select

from app.api.v1 import images as images_api
from app.config import NotificationType, settings
from app.core.exceptions import UpstreamServiceError
from app.models import AdminNotifications, Images, Ratings
from app.services.ai_detection import AIDetectionResult


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 80, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_PATH", str(tmp_path))
    monkeypatch.setattr(settings, "IMAGE_BASE_URL", "http://test/media")
    monkeypatch.setattr(settings, "AI_DETECTION_URL", None)
    return tmp_path


def _detector(result=None, error=None):
    async def _detect(image_bytes, content_type):
        if error is not None:
            raise error
        return result

    return _detect


@pytest.mark.api
class TestUploadImage:
    """Tests for POST /api/v1/images/upload."""

    async def test_upload_stores_file_and_row(
        self, client: AsyncClient, db_session, make_profile, auth_headers, storage
    ):
        owner = await make_profile()

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("sunset.png", _png_bytes(), "image/png")},
            data={"title": "  Sunset  ", "caption": "Golden hour"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Image uploaded successfully"
        assert data["ai_detection"] is None
        assert data["warning"] is None
        image = data["image"]
        assert image["title"] == "Sunset"
        assert image["caption"] == "Golden hour"
        assert image["user_id"] == owner.user_id
        assert image["total_ratings"] == 0
        assert image["image_url"].startswith(f"http://test/media/{owner.user_id}/")
        assert image["image_url"].endswith(".png")
        assert len(list((storage / owner.user_id).iterdir())) == 1
        await db_session.refresh(owner)
        assert owner.total_images == 1

    async def test_ai_verdict_is_stored_and_warns(
        self, client: AsyncClient, db_session, make_profile, auth_headers, storage, monkeypatch
    ):
        owner = await make_profile()
        verdict = AIDetectionResult(is_ai=True, confidence=93, reason="uniform noise")
        monkeypatch.setattr(images_api, "detect_ai_image", _detector(result=verdict))

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("robot.png", _png_bytes(), "image/png")},
            data={"title": "Robot"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["ai_detection"] == {"is_ai": True, "confidence": 93, "reason": "uniform noise"}
        assert "93% confidence" in data["warning"]
        assert data["image"]["ai_detected"] is True
        assert data["image"]["ai_confidence"] == 93
        notification = (await db_session.execute(select(AdminNotifications))).scalar_one()
        assert notification.notification_type == NotificationType.AI_DETECTED
        assert notification.image_id == data["image"]["image_id"]

    async def test_low_confidence_verdict_does_not_warn(
        self, client: AsyncClient, db_session, make_profile, auth_headers, storage, monkeypatch
    ):
        owner = await make_profile()
        verdict = AIDetectionResult(is_ai=True, confidence=40, reason="maybe")
        monkeypatch.setattr(images_api, "detect_ai_image", _detector(result=verdict))

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("maybe.png", _png_bytes(), "image/png")},
            data={"title": "Maybe"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        assert response.json()["warning"] is None
        count = await db_session.execute(select(func.count()).select_from(AdminNotifications))
        assert count.scalar_one() == 0

    async def test_detector_outage_does_not_block_upload(
        self, client: AsyncClient, make_profile, auth_headers, storage, monkeypatch
    ):
        owner = await make_profile()
        monkeypatch.setattr(
            images_api, "detect_ai_image", _detector(error=UpstreamServiceError("AI detection"))
        )

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            data={"title": "Photo"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        assert response.json()["ai_detection"] is None
        assert response.json()["image"]["ai_detected"] is None

    async def test_rejects_non_image_bytes(self, client: AsyncClient, make_profile, auth_headers, storage):
        owner = await make_profile()

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("fake.png", b"definitely not a png", "image/png")},
            data={"title": "Fake"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400
        assert not (storage / owner.user_id).exists()

    async def test_rejects_non_image_content_type(
        self, client: AsyncClient, make_profile, auth_headers, storage
    ):
        owner = await make_profile()

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"title": "Notes"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400

    async def test_rejects_disallowed_extension(self, client: AsyncClient, make_profile, auth_headers, storage):
        owner = await make_profile()

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("photo.bmp", _png_bytes(), "image/png")},
            data={"title": "Bitmap"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400

    async def test_rejects_oversized_file(
        self, client: AsyncClient, make_profile, auth_headers, storage, monkeypatch
    ):
        owner = await make_profile()
        monkeypatch.setattr(settings, "MAX_IMAGE_SIZE", 10)

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("big.png", _png_bytes(), "image/png")},
            data={"title": "Big"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 413

    async def test_title_required(self, client: AsyncClient, make_profile, auth_headers, storage):
        owner = await make_profile()

        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            data={"title": "   "},
            headers=auth_headers(owner),
        )

        assert response.status_code == 422

    async def test_requires_authentication(self, client: AsyncClient, storage):
        response = await client.post(
            "/api/v1/images/upload",
            files={"file": ("photo.png", _png_bytes(), "image/png")},
            data={"title": "Photo"},
        )

        assert response.status_code == 401


@pytest.mark.api
class TestGetImage:
    """Tests for GET /api/v1/images/{image_id}."""

    async def test_detail_with_owner_and_own_rating(
        self, client: AsyncClient, make_profile, make_image, auth_headers
    ):
        owner = await make_profile()
        viewer = await make_profile()
        image = await make_image(owner, title="Harbour")
        await client.post(
            f"/api/v1/images/{image.image_id}/rating", json={"rating": 6}, headers=auth_headers(viewer)
        )

        response = await client.get(f"/api/v1/images/{image.image_id}", headers=auth_headers(viewer))

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Harbour"
        assert data["owner"]["user_id"] == owner.user_id
        assert data["user_rating"] == 6
        assert data["average_rating"] == 6.0

    async def test_anonymous_detail(self, client: AsyncClient, make_profile, make_image):
        image = await make_image(await make_profile())

        response = await client.get(f"/api/v1/images/{image.image_id}")

        assert response.status_code == 200
        assert response.json()["user_rating"] is None

    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/images/424242")

        assert response.status_code == 404


@pytest.mark.api
class TestDeleteImage:
    """Tests for DELETE /api/v1/images/{image_id}."""

    async def test_owner_can_delete(
        self, client: AsyncClient, db_session, make_profile, make_image, auth_headers
    ):
        owner = await make_profile()
        rater = await make_profile()
        image = await make_image(owner)
        image_id = image.image_id
        await client.post(
            f"/api/v1/images/{image_id}/rating", json={"rating": 9}, headers=auth_headers(rater)
        )

        response = await client.delete(f"/api/v1/images/{image_id}", headers=auth_headers(owner))

        assert response.status_code == 200
        images = await db_session.execute(select(func.count()).select_from(Images))
        ratings = await db_session.execute(select(func.count()).select_from(Ratings))
        assert images.scalar_one() == 0
        assert ratings.scalar_one() == 0
        profile = await client.get(f"/api/v1/profiles/{owner.user_id}")
        assert profile.json()["total_ratings_received"] == 0
        assert profile.json()["average_rating"] == 0.0

    async def test_admin_can_delete(self, client: AsyncClient, make_profile, make_image, auth_headers):
        admin = await make_profile(admin=True)
        image = await make_image(await make_profile())

        response = await client.delete(f"/api/v1/images/{image.image_id}", headers=auth_headers(admin))

        assert response.status_code == 200

    async def test_others_cannot_delete(self, client: AsyncClient, make_profile, make_image, auth_headers):
        image = await make_image(await make_profile())
        stranger = await make_profile()

        response = await client.delete(f"/api/v1/images/{image.image_id}", headers=auth_headers(stranger))

        assert response.status_code == 403
