"""Domain service settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class RepositorySettings(BaseSettings):
    """Avatar repository configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="AVATARVOICE_REPO_",
        env_file=".env",
        extra="ignore",
    )

    # Seconds before a storage call is abandoned; 0 or None waits forever
    storage_timeout: float | None = 10.0

    # Background blob cleanup
    cleanup_max_attempts: int = 3
    cleanup_retry_delay: float = 0.5

    # Move an undecodable collection document aside on load
    discard_corrupt_record: bool = True


settings = RepositorySettings()
