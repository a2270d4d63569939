"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL (entity store)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "internhub_user"
    postgres_password: str = "password"
    postgres_db: str = "internhub_db"

    # MongoDB (GridFS resume bucket)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "internhub_files"
    mongodb_timeout_ms: int = 5000
    resume_bucket: str = "resumes"
    max_resume_size_mb: int = 10

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Listing ingestion (Apify LinkedIn job scraper)
    apify_token: str = ""
    apify_base_url: str = "https://api.apify.com/v2"
    apify_actor: str = "forward_dinosaur~linkedin-job-scraper"
    ingestion_max_items: int = 20
    ingestion_timeout_seconds: float = 120.0

    # Search: when True a free-text query alone decides the match
    # (after the country check) instead of being ANDed with other filters
    search_query_overrides_filters: bool = False

    # Deadlines are calendar dates in this time zone
    timezone: str = "Asia/Kolkata"

    # App
    log_level: str = "INFO"
    debug: bool = False

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def max_resume_size_bytes(self) -> int:
        return self.max_resume_size_mb * 1024 * 1024

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
