"""Configuration settings for the VIP transfer API."""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings with Pydantic validation."""

    # Database settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./vip_transfer.db",
        description="Async database URL (sqlite+aiosqlite or postgresql+asyncpg)"
    )

    # Environment settings
    environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Application log level"
    )

    otlp_endpoint: str = Field(
        default="",
        description="OTLP collector endpoint; tracing export is disabled when empty"
    )

    notification_log_path: str = Field(
        default="logs/notification_log.txt",
        description="Append-only diagnostic log for notification attempts"
    )

    # Security settings
    bearer_token_secret: str = Field(
        default="your-secret-key-here",
        description="Secret key for admin bearer token validation"
    )

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins"
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # Business rules
    business_timezone: str = Field(
        default="Europe/Istanbul",
        description="IANA timezone used for the booking lead-time rule"
    )

    booking_lead_time_minutes: int = Field(
        default=60,
        ge=0,
        description="Minimum minutes between submission and transfer time"
    )

    default_rate_try: float = Field(default=38.27, gt=0, description="Fallback EUR->TRY rate")
    default_rate_usd: float = Field(default=1.05, gt=0, description="Fallback EUR->USD rate")
    default_rate_gbp: float = Field(default=0.83, gt=0, description="Fallback EUR->GBP rate")

    # Cache settings (seconds)
    rate_cache_ttl_seconds: int = Field(default=600, description="Currency rate cache TTL")
    vehicle_cache_ttl_seconds: int = Field(default=900, description="Vehicle cache TTL")
    region_cache_ttl_seconds: int = Field(default=1800, description="Region cache TTL")
    hero_cache_ttl_seconds: int = Field(default=1800, description="Hero slide cache TTL")
    settings_cache_ttl_seconds: int = Field(default=1800, description="Site settings cache TTL")
    output_cache_ttl_seconds: int = Field(default=300, description="Tagged output cache TTL")
    browser_cache_max_age_seconds: int = Field(
        default=300,
        description="Cache-Control max-age for public catalog responses"
    )

    homepage_vehicle_count: int = Field(default=3, description="Vehicles shown on the homepage")
    homepage_region_count: int = Field(default=6, description="Regions shown on the homepage")

    vehicle_image_dir: str = Field(
        default="static/images/vehicles",
        description="Directory scanned for self-healing vehicle images"
    )

    vehicle_image_url_prefix: str = Field(
        default="/images/vehicles/",
        description="URL prefix for self-assigned vehicle images"
    )

    # SMTP settings
    smtp_host: str = Field(default="localhost", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_username: str = Field(default="", description="SMTP username")
    smtp_password: str = Field(default="", description="SMTP password")
    smtp_start_tls: bool = Field(default=True, description="Upgrade SMTP connection with STARTTLS")
    sender_email: str = Field(default="info@example.com", description="Sender address")
    sender_name: str = Field(default="VIP Transfer", description="Sender display name")
    admin_emails: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Admin alert recipients (comma-separated in the environment)"
    )

    # WhatsApp Cloud API settings
    whatsapp_enabled: bool = Field(default=False, description="Enable the WhatsApp document channel")
    whatsapp_access_token: str = Field(default="", description="Graph API access token")
    whatsapp_phone_number_id: str = Field(default="", description="Sender phone number id")
    whatsapp_recipient_phone: str = Field(default="", description="Recipient phone number")
    whatsapp_api_version: str = Field(default="v22.0", description="Graph API version")
    whatsapp_base_url: str = Field(
        default="https://graph.facebook.com",
        description="Graph API base URL"
    )

    # Notification settings
    notification_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single notification channel"
    )

    # Document settings
    brand_name: str = Field(default="Imperial VIP Transfer", description="Brand shown on documents")
    brand_logo_path: str = Field(default="", description="Logo embedded inline in emails")
    contact_email: str = Field(default="info@transferimperialvip.com", description="Footer contact email")
    contact_phone: str = Field(default="+90 533 925 10 20", description="Footer phone for one-way trips")
    return_contact_phone: str = Field(
        default="+90 532 580 70 77",
        description="Footer phone for round trips"
    )
    document_font_path: str = Field(
        default="/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        description="Unicode TTF font used for itinerary documents"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "test", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("cors_origins", "admin_emails", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Parse a comma-separated string or list, dropping blanks."""
        if isinstance(v, str):
            v = v.split(",")
        return [item.strip() for item in v if item and item.strip()]

    @property
    def debug(self) -> bool:
        """Return True if in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Return True if in production mode."""
        return self.environment == "production"

    @property
    def whatsapp_configured(self) -> bool:
        """Return True if the document channel is enabled and fully configured."""
        return bool(
            self.whatsapp_enabled
            and self.whatsapp_access_token
            and self.whatsapp_phone_number_id
            and self.whatsapp_recipient_phone
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = Settings()
