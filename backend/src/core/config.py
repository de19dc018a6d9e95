"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_DATABASE_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "::1"})


def database_host(database_url: str) -> str:
    """Hostname of a database URL, or "" when it has none or cannot be parsed."""
    try:
        return (urlparse(database_url).hostname or "").lower()
    except ValueError:
        return ""


class Settings(BaseSettings):
    """
    Settings read from the environment (and `.env` during development).

    Names with a VITE_ prefix are shared with the frontend build, which only
    exposes variables carrying that prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    auth0_domain: str = Field(default="", validation_alias="VITE_AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="VITE_AUTH0_AUDIENCE")

    # Skips token validation entirely; only allowed against a local database
    dev_mode: bool = Field(default=False, validation_alias="VITE_DEV_MODE")

    # Comma-separated; see cors_origins
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    max_url_length: int = Field(default=2048, validation_alias="MAX_URL_LENGTH")
    max_title_length: int = Field(default=200, validation_alias="MAX_TITLE_LENGTH")
    max_content_length: int = Field(default=50_000, validation_alias="MAX_CONTENT_LENGTH")
    max_summary_length: int = Field(default=2000, validation_alias="MAX_SUMMARY_LENGTH")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case for the level name."""
        return v.strip().upper()

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """Refuse DEV_MODE unless the database is on this machine."""
        if self.dev_mode:
            host = database_host(self.database_url)
            if host not in LOCAL_DATABASE_HOSTS:
                raise ValueError(
                    f"DEV_MODE cannot be enabled with a non-local database "
                    f"(host '{host}'). DEV_MODE bypasses all authentication "
                    f"and must only be used locally.",
                )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins, blanks dropped."""
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    @property
    def auth0_issuer(self) -> str:
        """Expected `iss` claim."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Where Auth0 publishes the token signing keys."""
        return f"{self.auth0_issuer}.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
