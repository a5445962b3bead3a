"""Application settings via Pydantic Settings."""

from functools import lru_cache
import json

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Marketplace Admin API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Marketplace backend (REST API that stores products/orders/vouchers)
    backend_api_url: str = Field(
        default="http://localhost:3000/api",
        validation_alias=AliasChoices("BACKEND_API_URL", "NEXT_PUBLIC_API_URL"),
    )
    backend_api_token: str = Field(
        default="",
        validation_alias=AliasChoices("BACKEND_API_TOKEN"),
        description="Bearer token forwarded to the backend when the caller sends none",
    )
    backend_timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("BACKEND_TIMEOUT"),
        gt=0,
    )

    @property
    def backend_base_url(self) -> str:
        """Backend base URL without a trailing slash."""
        return self.backend_api_url.rstrip("/")

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    query_cache_ttl: int = Field(
        default=60,
        validation_alias=AliasChoices("QUERY_CACHE_TTL"),
        ge=1,
        le=3600,
        description="TTL (seconds) for cached backend read queries",
    )

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias=AliasChoices("CORS_ORIGINS", "ALLOWED_ORIGINS"),
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        """
        Accept either:
        - JSON array string: '["https://a.com","http://localhost:3000"]'
        - Comma-separated string: "https://a.com,http://localhost:3000"
        - Already-parsed list[str]
        """
        if v is None:
            return []
        if isinstance(v, list):
            return [str(x).strip() for x in v if str(x).strip()]
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    parsed = json.loads(s)
                except json.JSONDecodeError:
                    # Fall back to comma split if env var isn't valid JSON.
                    parsed = s.split(",")
                if isinstance(parsed, list):
                    return [str(x).strip() for x in parsed if str(x).strip()]
                return [str(parsed).strip()]
            return [part.strip() for part in s.split(",") if part.strip()]
        return [str(v).strip()] if str(v).strip() else []

    # Lookups
    brand_lookup_limit: int = Field(
        default=100,
        validation_alias=AliasChoices("BRAND_LOOKUP_LIMIT"),
        ge=1,
        le=1000,
        description="per_page used when loading brands for the brand_name value select",
    )

    # Uploads
    voucher_import_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        validation_alias=AliasChoices("VOUCHER_IMPORT_MAX_BYTES"),
        ge=1,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
