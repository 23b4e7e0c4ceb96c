"""Environment-driven settings."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``MAILQUEUE_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="MAILQUEUE_", env_file=".env", extra="ignore")

    # Queue
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=5.0, ge=0)
    send_delay: float = Field(default=1.0, ge=0)

    # Brevo transactional API
    brevo_api_key: str = ""
    brevo_api_url: str = "https://api.brevo.com/v3/smtp/email"
    from_email: str = "noreply@loyaltyprogram.com"
    from_name: str = "Loyalty Program"
    request_timeout: float = Field(default=10.0, gt=0)

    log_level: str = "INFO"

    def masked_api_key(self) -> str:
        if not self.brevo_api_key:
            return "(not set)"
        return self.brevo_api_key[:4] + "*" * max(len(self.brevo_api_key) - 4, 4)


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
