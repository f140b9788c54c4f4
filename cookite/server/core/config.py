from datetime import date

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    REDIS_URL: str = "redis://localhost:6379/0"

    API_PREFIX: str = "/api/v1"
    SERVICE_NAME: str = "Cookite Reservations API"
    CORS_ORIGINS: str = "*"  # comma-separated

    # Resend transactional email
    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com"
    EMAIL_FROM: str = "Cookite JEPP <noreply@resend.dev>"

    EVENT_DATE: date = date(2025, 9, 12)
    EVENT_DATE_LABEL: str = "12 de Setembro de 2025"
    EVENT_LOCATION: str = "Escola Estadual Exemplo - Ginásio / Stand B"
    REMINDER_DELAY_SECONDS: float = 0.1

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = ConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
