"""AI-generated image detection client.

The detector is a remote function that classifies a base64 data URL and
answers with {"isAI": bool, "confidence": int, "reason": str}. Its verdict is
advisory metadata: callers decide what to do when it is unavailable.
"""

import base64

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.config import settings
from app.core.exceptions import UpstreamServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)

_REASON_MAX_LENGTH = 1000


class AIDetectionResult(BaseModel):
    """Detector verdict. confidence is clamped to 0-100."""

    model_config = ConfigDict(populate_by_name=True)

    is_ai: bool = Field(alias="isAI")
    confidence: int = 0
    reason: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: object) -> int:
        try:
            value = round(float(v))  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise ValueError("confidence must be a number") from e
        return max(0, min(100, value))

    @field_validator("reason", mode="before")
    @classmethod
    def truncate_reason(cls, v: object) -> str:
        return str(v or "")[:_REASON_MAX_LENGTH]

    @property
    def needs_warning(self) -> bool:
        """True when the uploader should be told the image looks AI-generated."""
        return self.is_ai and self.confidence > settings.AI_WARNING_CONFIDENCE


def to_data_url(image_bytes: bytes, content_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def detect_ai_image(image_bytes: bytes, content_type: str) -> AIDetectionResult | None:
    """
    Ask the remote detector whether an image is AI-generated.

    Args:
        image_bytes: Raw image content
        content_type: MIME type of the image, embedded in the data URL

    Returns:
        The verdict, or None when no detector is configured

    Raises:
        UpstreamServiceError: the detector failed or answered with an unusable body
    """
    if not settings.AI_DETECTION_URL:
        logger.debug("ai_detection_skipped", reason="not_configured")
        return None

    headers = {}
    if settings.AI_DETECTION_API_KEY:
        headers["Authorization"] = f"Bearer {settings.AI_DETECTION_API_KEY}"

    try:
        async with httpx.AsyncClient(timeout=settings.AI_DETECTION_TIMEOUT) as client:
            response = await client.post(
                settings.AI_DETECTION_URL,
                json={"imageBase64": to_data_url(image_bytes, content_type)},
                headers=headers,
            )
            response.raise_for_status()
            result = AIDetectionResult.model_validate(response.json())

    except httpx.HTTPError as e:
        logger.error("ai_detection_api_error", error=str(e))
        raise UpstreamServiceError("AI detection") from e
    except (ValidationError, ValueError) as e:
        logger.error("ai_detection_invalid_response", error=str(e))
        raise UpstreamServiceError("AI detection") from e

    logger.info(
        "ai_detection_completed",
        is_ai=result.is_ai,
        confidence=result.confidence,
    )
    return result
