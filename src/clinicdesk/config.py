"""Settings for the ClinicDesk service, read from the environment or ``.env``."""

from functools import lru_cache
from pathlib import Path

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clinicdesk.core.constants import DEFAULT_INSECURE_SECRET, MIN_SECRET_KEY_LENGTH


_SECRET_HINT = "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "ClinicDesk"
    environment: str = "development"  # development, staging, production
    debug: bool = False
    log_level: str = "INFO"

    # Signing key for access tokens
    secret_key: str = DEFAULT_INSECURE_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # one clinic shift

    # YAML list of accounts loaded at startup; the directory starts empty without it
    users_file: Path | None = None

    cors_origins: list[str] = []

    # Base of the problem ``type`` URIs
    api_docs_base_url: str = "https://api.example.com"

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        # The development default passes here; is_production refuses it.
        if v != DEFAULT_INSECURE_SECRET and len(v) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(
                f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters. {_SECRET_HINT}"
            )
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """True in production.

        Raises:
            ValueError: If production is still using the development secret
        """
        if self.environment != "production":
            return False
        if self.secret_key == DEFAULT_INSECURE_SECRET:
            raise ValueError(f"SECRET_KEY must be set to a secure value in production. {_SECRET_HINT}")
        return True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
