"""Blob storage settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Blob storage configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="AVATARVOICE_STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    # "local" (filesystem) or "assetdb" (embedded key/value table)
    storage_type: str = "local"
    base_path: str = "./data"
    audio_dir_name: str = "audio_files"
    image_dir_name: str = "avatar_images"


settings = StorageSettings()
