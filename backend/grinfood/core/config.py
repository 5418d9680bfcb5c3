"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. This ensures:
1. Type validation at startup
2. Centralized configuration
3. Documentation of available settings
4. Proper defaults
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    app_name: str = "Grinfood API"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_prefix: str = "/api"

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ==========================================================================
    # Storage and identity (Firebase)
    # ==========================================================================
    document_store: Literal["firestore", "memory"] = "firestore"
    # Raw service-account JSON, as FIREBASE_SERVICE_JSON in the deployed env
    firebase_service_json: Optional[str] = None
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None

    # ==========================================================================
    # Payments (Stripe)
    # ==========================================================================
    stripe_secret_key: str = ""
    payment_currency: str = "uah"

    # ==========================================================================
    # SMS one-time codes (Twilio Verify)
    # ==========================================================================
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_verify_service_sid: str = ""

    # ==========================================================================
    # Transactional email (SendGrid)
    # ==========================================================================
    sendgrid_api_key: str = ""
    sendgrid_from_email: str = ""
    reset_redirect_url: str = "https://grinfood-c34ac.web.app/reset-password"
    app_base_url: str = "https://grinfood-c34ac.web.app"

    # ==========================================================================
    # Request handling
    # ==========================================================================
    request_timeout_seconds: float = 15.0
    read_retry_attempts: int = 3
    read_retry_base_delay: float = 0.1  # seconds, doubled per attempt

    # Authorization decisions for behaviour the legacy API allowed
    allow_self_assigned_manager: bool = False
    allow_terminal_order_transitions: bool = False

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("read_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("READ_RETRY_ATTEMPTS must be at least 1")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate settings for production safety."""
        import warnings

        if not self.debug:
            if self.document_store == "memory":
                raise ValueError(
                    "FATAL: Cannot start in production mode with the in-memory document store. "
                    "Set DOCUMENT_STORE=firestore."
                )

            localhost_patterns = ["localhost", "127.0.0.1", "0.0.0.0"]
            origins = [o.strip() for o in self.cors_origins.split(",")]
            localhost_origins = [o for o in origins if any(p in o for p in localhost_patterns)]
            if localhost_origins:
                warnings.warn(
                    f"CORS origins contain localhost URLs in production mode: {localhost_origins}. "
                    "Remove localhost origins for production by setting CORS_ORIGINS environment variable.",
                    UserWarning,
                    stacklevel=2,
                )

        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list, filtering localhost in production."""
        if self.cors_origins == "*":
            return ["*"]

        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

        if not self.debug:
            localhost_patterns = ["localhost", "127.0.0.1", "0.0.0.0"]
            origins = [o for o in origins if not any(p in o for p in localhost_patterns)]

        return origins


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
