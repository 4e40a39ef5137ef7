"""Application settings, read from the environment or a local .env file."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Ledgerbooks API"
    log_level: str = "INFO"
    database_url: str = "sqlite+pysqlite:///./ledgerbooks.db"
    cors_origins: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Tokens are minted by the external identity provider; we only verify them.
    jwt_secret_key: str = "ledgerbooks-dev-secret"
    jwt_algorithm: str = "HS256"

    # HMRC Making Tax Digital (sandbox by default)
    hmrc_base_url: str = "https://test-api.service.hmrc.gov.uk"
    hmrc_timeout_seconds: float = 30.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
