"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars like MARIADB_* used by docker-compose
    )

    # Application
    PROJECT_NAME: str = "PhotoRank API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    DEBUG: bool = Field(default=False)
    API_V1_STR: str = "/api/v1"

    # Security (tokens are issued by the identity provider and signed with this key)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    # Allow str because it can be a comma-separated string in .env
    CORS_ORIGINS: str | list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8080"]
    )

    # Database
    DATABASE_URL: str
    # Sync URL for Alembic migrations
    DATABASE_URL_SYNC: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0")

    # Arq task queue
    ARQ_REDIS_URL: str = Field(default="redis://localhost:6379/1")
    ARQ_MAX_TRIES: int = 3
    ARQ_KEEP_RESULT: int = 3600  # 1 hour

    # File Storage
    STORAGE_PATH: str = "/photorank/images"
    IMAGE_BASE_URL: str = "http://localhost:8000/media"
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB

    # AI detection function (detection is skipped when no URL is configured)
    AI_DETECTION_URL: str | None = None
    AI_DETECTION_API_KEY: str | None = None
    AI_DETECTION_TIMEOUT: float = 30.0
    AI_WARNING_CONFIDENCE: int = 70

    # Leaderboard
    # Allow str because it can be a comma-separated string in .env
    LEADERBOARD_TOP_LIMITS: str | list[int] = Field(default=[10, 100, 1000])
    EXPLORE_LIMIT: int = 50
    STREAK_TRACKING_ENABLED: bool = True
    # A ranking period is one calendar day in this timezone
    STREAK_TIMEZONE: str = "UTC"
    BADGE_COUNT: int = 3

    # Moderation
    REPORT_RATE_LIMIT: int = 10
    REPORT_RATE_WINDOW_MINUTES: int = 60
    ADMIN_NOTIFICATION_LIMIT: int = 50

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("LEADERBOARD_TOP_LIMITS", mode="before")
    @classmethod
    def parse_top_limits(cls, v: str | list[int]) -> list[int]:
        """Parse leaderboard limits from comma-separated string"""
        if isinstance(v, str):
            return [int(limit.strip()) for limit in v.split(",") if limit.strip()]
        return v


# Create global settings instance

load_dotenv()
settings = Settings()  # type: ignore[call-arg]


class Granularity:
    """Geographic levels used for leaderboard scoping and streak tracking"""

    CONTINENT = "continent"
    COUNTRY = "country"
    STATE = "state"
    DISTRICT = "district"
    CITY = "city"

    # Broadest first
    ALL = (CONTINENT, COUNTRY, STATE, DISTRICT, CITY)


# Stored as streaks.location_value when the scope is unconstrained
GLOBAL_SCOPE = "global"


class ReportStatus:
    """Report status constants"""

    PENDING = "pending"
    DISMISSED = "dismissed"
    REMOVED = "removed"


class ReportType:
    """Report category constants"""

    COPYRIGHT = "copyright"
    NUDITY = "nudity"
    SPAM = "spam"
    OTHER = "other"

    LABELS = {
        COPYRIGHT: "Copyright Infringement",
        NUDITY: "Nudity or Sexual Content",
        SPAM: "Spam or Misleading Content",
        OTHER: "Other Issue",
    }


class NotificationType:
    """Admin notification type constants"""

    IMAGE_REPORT = "image_report"
    AI_DETECTED = "ai_detected"


class AppRole:
    """User role constants"""

    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"
