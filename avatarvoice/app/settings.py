"""API settings configuration."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """Settings for the avatar voice API server."""

    model_config = SettingsConfigDict(
        env_prefix="AVATARVOICE_API_",
        env_file=".env",
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = Field(
        default=8000,
        validation_alias=AliasChoices("AVATARVOICE_API_PORT", "PORT"),
    )
    log_level: str = "info"


settings = APISettings()
