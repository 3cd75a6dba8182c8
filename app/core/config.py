# File: app/core/config.py

from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    .env file may contain (all optional, defaults shown):

    - DATABASE_URL=sqlite:///./lapor.db
    - BACKEND_CORS_ORIGINS=http://localhost:8000,http://127.0.0.1:8000
    - SESSION_TTL_SECONDS=86400
    - LOG_LEVEL=INFO
    - REPORT_RATE_LIMIT=10/minute

    SISPAA forwarding (no API key means the integration is disabled and every
    forward attempt is recorded as failed):
    - SISPAA_API_URL=https://api.sispaa.gov.my
    - SISPAA_API_KEY=your-api-key
    - SISPAA_TIMEOUT_SECONDS=30
    - SISPAA_RETRY_ENABLED=true
    - SISPAA_RETRY_INTERVAL_SECONDS=300
    - SISPAA_MAX_ATTEMPTS=10

    IP geolocation providers ({ip} is substituted):
    - GEO_PRIMARY_URL=https://ipapi.co/{ip}/json/
    - GEO_FALLBACK_URL=http://ip-api.com/json/{ip}
    - GEO_TIMEOUT_SECONDS=5

    Bootstrap admin account:
    - ADMIN_EMAIL=admin@lapor.local
    - ADMIN_PASSWORD=Admin123!
    - ADMIN_NAME=System Administrator
    - ADMIN_PHONE=
    """
    database_url: str = Field(default="sqlite:///./lapor.db", alias="DATABASE_URL")
    backend_cors_origins: str = Field(
        default="http://localhost:8000,http://127.0.0.1:8000",
        alias="BACKEND_CORS_ORIGINS",
    )
    session_ttl_seconds: int = Field(default=24 * 60 * 60, alias="SESSION_TTL_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    report_rate_limit: str = Field(default="10/minute", alias="REPORT_RATE_LIMIT")

    sispaa_api_url: str = Field(default="https://api.sispaa.gov.my", alias="SISPAA_API_URL")
    sispaa_api_key: Optional[str] = Field(default=None, alias="SISPAA_API_KEY")
    sispaa_timeout_seconds: float = Field(default=30, alias="SISPAA_TIMEOUT_SECONDS")
    sispaa_retry_enabled: bool = Field(default=True, alias="SISPAA_RETRY_ENABLED")
    sispaa_retry_interval_seconds: int = Field(default=5 * 60, alias="SISPAA_RETRY_INTERVAL_SECONDS")
    sispaa_max_attempts: int = Field(default=10, alias="SISPAA_MAX_ATTEMPTS")

    geo_primary_url: str = Field(default="https://ipapi.co/{ip}/json/", alias="GEO_PRIMARY_URL")
    geo_fallback_url: str = Field(default="http://ip-api.com/json/{ip}", alias="GEO_FALLBACK_URL")
    geo_timeout_seconds: float = Field(default=5, alias="GEO_TIMEOUT_SECONDS")

    admin_email: str = Field(default="admin@lapor.local", alias="ADMIN_EMAIL")
    admin_password: str = Field(default="Admin123!", alias="ADMIN_PASSWORD")
    admin_name: str = Field(default="System Administrator", alias="ADMIN_NAME")
    admin_phone: Optional[str] = Field(default=None, alias="ADMIN_PHONE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

DEFAULT_ADMIN_PASSWORD = "Admin123!"

def cors_origins_list() -> List[str]:
    raw = settings.backend_cors_origins or ""
    return [x.strip().rstrip("/") for x in raw.split(",") if x.strip()]

settings = Settings()
