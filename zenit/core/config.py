from pathlib import Path

from pydantic import ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zenit.models.slot import BusinessHours

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str

    # JWT
    secret_key: str
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    algorithm: str = "HS256"

    # CORS
    cors_origins: str = "http://localhost:5173"

    # Business hours: slots are carved between start and end (end is exclusive)
    business_start_hour: int = 9
    business_end_hour: int = 18
    business_timezone: str = "America/Sao_Paulo"
    # Clients may book from tomorrow up to this many days ahead
    booking_window_days: int = 7

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @model_validator(mode="after")
    def _check_business_hours(self) -> "Settings":
        try:
            self._build_business_hours()
        except ValidationError as e:
            raise ValueError(f"Invalid business hours configuration: {e}") from e
        return self

    def _build_business_hours(self) -> BusinessHours:
        return BusinessHours(
            start_hour=self.business_start_hour,
            end_hour=self.business_end_hour,
            timezone=self.business_timezone,
        )

    @property
    def business_hours(self) -> BusinessHours:
        return self._build_business_hours()


settings = Settings()
