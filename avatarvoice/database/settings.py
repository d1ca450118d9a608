"""Database settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings.

    The same SQLite file backs the preference store (collection document),
    the embedded asset store and the pending deletion ledger.
    """

    model_config = SettingsConfigDict(
        env_prefix="AVATARVOICE_DB_",
        env_file=".env",
        extra="ignore",
    )

    sqlite_path: str = "./data/avatarvoice.db"
    echo: bool = False

    # Preference keys
    document_key: str = "avatars_data_v2"
    sync_key: str = "last_storage_sync"

    @property
    def database_url(self) -> str:
        """SQLite URL for ``sqlite_path`` (":memory:" gives a private in-memory db)."""
        if self.sqlite_path == ":memory:":
            return "sqlite://"
        return f"sqlite:///{self.sqlite_path}"


settings = DatabaseSettings()
