"""Application settings and configuration.

This module defines all configuration options for the localip-pub service.
Settings are loaded from environment variables with sensible defaults.
"""

import secrets

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from localip_pub import __version__


def _random_secret() -> str:
    """Return 40 random hex characters used when no JWT secret is configured."""
    return secrets.token_hex(20)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="localip-pub", alias="APP_NAME")
    app_version: str = Field(default=__version__, alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Network binding for the bundled uvicorn runner
    hostname: str = Field(default="0.0.0.0", alias="LIP_HOSTNAME")
    port: int = Field(default=8080, alias="LIP_PORT")

    # Database configuration
    database_url: str = Field(default="sqlite:///./lip.sqlite", alias="LIP_DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT settings; a random secret invalidates all tokens on restart
    jwt_secret: str = Field(default_factory=_random_secret, alias="LIP_JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_ttl_seconds: int = Field(default=360, alias="LIP_TOKEN_TTL_SECONDS")

    # Address lifetime bounds (seconds)
    max_lifetime_seconds: int = Field(default=31_536_000, alias="LIP_MAX_LIFETIME_SECONDS")

    # Read token throttling: bucket capacity and seconds per refilled token
    read_token_capacity: int = Field(default=6, alias="LIP_READ_TOKEN_CAPACITY")
    read_token_refill_seconds: float = Field(default=10.0, alias="LIP_READ_TOKEN_REFILL_SECONDS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    to_stdout: bool = Field(default=True, alias="LIP_TO_STDOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
