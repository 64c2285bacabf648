"""
Shared configuration management for the document registry client.
"""

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="REGISTRY_",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class SubmitterSettings(BaseConfig):
    """Settings for the document submitter.

    Credentials and signatures are supplied per call and never read from
    the environment.
    """

    registry_base_url: str = Field(default="https://ismp.crpt.ru")
    endpoint_variant: str = Field(default="bearer_token")
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Rate limiting
    rate_window_seconds: float = Field(default=1.0, gt=0)
    rate_max_requests: int = Field(default=10, ge=1)

    @property
    def rate_window(self) -> timedelta:
        return timedelta(seconds=self.rate_window_seconds)


def get_settings(**overrides) -> SubmitterSettings:
    """Build settings from the environment, with explicit overrides."""
    return SubmitterSettings(**overrides)
