from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "fitclub-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Fitclub")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/fitclub_dev")
    db_pool_size: int = int(os.getenv("DB_POOL_SIZE", "5"))
    db_echo: bool = os.getenv("DB_ECHO", "0") == "1"
    # Empty means the in-process key-value store is used
    redis_url: str = os.getenv("REDIS_URL", "")
    cron_secret: str = os.getenv("CRON_SECRET", "")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")

    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "community-uploads")
    s3_bucket_card_photos: str = os.getenv("S3_BUCKET_CARD_PHOTOS", "dating-card-photos")
    s3_bucket_legacy_photos: str = os.getenv("S3_BUCKET_LEGACY_PHOTOS", "dating-photos")

    # Signed URL cache
    signed_url_ttl_seconds: int = int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600"))
    signed_url_refresh_margin_seconds: int = int(os.getenv("SIGNED_URL_REFRESH_MARGIN_SECONDS", "600"))
    signed_url_bucket_hint_ttl_seconds: int = int(os.getenv("SIGNED_URL_BUCKET_HINT_TTL_SECONDS", "86400"))

    # Open card queue
    open_card_limit_male: int = int(os.getenv("OPEN_CARD_LIMIT_MALE", "15"))
    open_card_limit_female: int = int(os.getenv("OPEN_CARD_LIMIT_FEMALE", "20"))
    open_card_expire_hours: int = int(os.getenv("OPEN_CARD_EXPIRE_HOURS", "48"))
    card_applications_per_day: int = int(os.getenv("CARD_APPLICATIONS_PER_DAY", "10"))

    # Weekly rankings
    ranking_timezone: str = os.getenv("RANKING_TIMEZONE", "Asia/Seoul")
    weekly_min_votes: int = int(os.getenv("WEEKLY_MIN_VOTES", "5"))

settings = Settings()
