# barbershop/config.py

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./barber.db"

    secret_key: str = "change-me-later"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    business_timezone: str = "America/Sao_Paulo"
    business_open: str = "09:00"
    business_close: str = "21:00"
    slot_step_minutes: int = 30
    default_service_minutes: int = 30

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_prefix="BARBERSHOP_",
        extra="ignore",
    )

    @field_validator("slot_step_minutes", "default_service_minutes")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    return settings
