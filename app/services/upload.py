"""
Image upload helpers for validation, file saving, and record creation.
"""

import io
import time
from pathlib import Path as FilePath

from fastapi import HTTPException, UploadFile, status
from PIL import Image, UnidentifiedImageError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.logging import get_logger
from app.models import Images, Profiles
from app.services.aggregates import recalculate_user_ratings
from app.services.ai_detection import AIDetectionResult

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}

# Used when the filename carries no usable extension
_FORMAT_EXTENSIONS = {"JPEG": "jpg", "PNG": "png", "GIF": "gif", "WEBP": "webp"}


async def read_upload(file: UploadFile) -> bytes:
    """Read an uploaded file, enforcing MAX_IMAGE_SIZE."""
    content = await file.read()
    if len(content) > settings.MAX_IMAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds maximum of {settings.MAX_IMAGE_SIZE} bytes",
        )
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty",
        )
    return content


def validate_image_content(content: bytes, content_type: str | None, filename: str | None) -> str:
    """Validate uploaded image bytes and return the extension to store them under.

    Security: Content-Type and filename are user-controlled and can be spoofed.
    The bytes are opened with PIL to verify they are actually an image.
    """
    if not content_type or not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be an image",
        )

    try:
        with Image.open(io.BytesIO(content)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is not a valid image",
        ) from e

    ext = FilePath(filename).suffix.lower().lstrip(".") if filename else ""
    if not ext:
        ext = _FORMAT_EXTENSIONS.get(image_format or "", "")
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension {ext or '(none)'} not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )
    return ext


def save_image_file(content: bytes, user_id: str, ext: str) -> tuple[FilePath, str]:
    """
    Save image bytes to STORAGE_PATH/{user_id}/{timestamp}.{ext}.

    Returns:
        Tuple of (file_path, public_url)
    """
    user_dir = FilePath(settings.STORAGE_PATH) / user_id
    user_dir.mkdir(parents=True, exist_ok=True)

    filename = f"{int(time.time() * 1000)}.{ext}"
    final_path = user_dir / filename
    temp_path = user_dir / f"temp_{filename}"
    try:
        with open(temp_path, "wb") as f:
            f.write(content)
        temp_path.rename(final_path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error("image_save_failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save image",
        ) from e

    return final_path, f"{settings.IMAGE_BASE_URL.rstrip('/')}/{user_id}/{filename}"


async def create_image(
    db: AsyncSession,
    owner: Profiles,
    image_url: str,
    title: str,
    caption: str | None = None,
    description: str | None = None,
    detection: AIDetectionResult | None = None,
) -> Images:
    """Insert the image row and refresh the owner's counters."""
    image = Images(
        user_id=owner.user_id,
        image_url=image_url,
        title=title,
        caption=caption,
        description=description,
    )
    if detection is not None:
        image.ai_detected = detection.is_ai
        image.ai_confidence = detection.confidence
        image.ai_detection_reason = detection.reason
    db.add(image)
    await db.flush()

    await recalculate_user_ratings(db, owner.user_id)

    logger.info(
        "image_uploaded",
        image_id=image.image_id,
        user_id=owner.user_id,
        ai_detected=image.ai_detected,
    )
    return image
