"""
Centralized configuration management with strict validation
"""

from typing import Optional
from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    """Application configuration with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str = Field(..., validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL"))

    # Supabase
    supabase_url: str
    supabase_jwt_secret: str
    supabase_service_role_key: str
    media_bucket: str = "media"

    # Public base URL of the web app, used for OAuth redirect URIs
    public_url: str = "http://localhost:8080"

    # YouTube
    youtube_client_id: Optional[str] = None
    youtube_client_secret: Optional[str] = None

    # TikTok
    tiktok_client_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("TIKTOK_CLIENT_KEY", "TIKTOK_CLIENT_ID")
    )
    tiktok_client_secret: Optional[str] = None

    # Instagram
    instagram_app_id: Optional[str] = None
    instagram_app_secret: Optional[str] = None

    # Facebook
    facebook_app_id: Optional[str] = None
    facebook_app_secret: Optional[str] = None

    # Stripe
    stripe_secret_key: Optional[str] = None

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8000
    sentry_dsn: Optional[str] = None

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL is required")
        if not v.startswith(("postgresql://", "postgres://", "postgresql+asyncpg://")):
            raise ValueError("DATABASE_URL must be a valid PostgreSQL connection string")
        return v

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v):
        if not v or not v.startswith("https://"):
            raise ValueError("SUPABASE_URL must be a valid HTTPS URL")
        return v

    @field_validator("public_url")
    @classmethod
    def validate_public_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError("PUBLIC_URL must be an http(s) URL")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        if v not in ["development", "test", "staging", "production"]:
            raise ValueError("ENVIRONMENT must be one of: development, test, staging, production")
        return v

    def redirect_uri(self, platform: str) -> str:
        """OAuth redirect URI for a platform callback page"""
        return f"{self.public_url.rstrip('/')}/{platform}-callback"


@lru_cache()
def get_config() -> Config:
    """Get cached configuration instance"""
    try:
        return Config()
    except Exception as e:
        raise RuntimeError(f"Configuration validation failed: {str(e)}")
