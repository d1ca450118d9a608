"""Database models (SQLModel)."""

from datetime import UTC, datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


class PreferenceModel(SQLModel, table=True):
    """Key/value preference row. The whole avatar collection lives in one row."""

    __tablename__ = "preferences"  # pyright: ignore[reportAssignmentType]

    key: str = Field(primary_key=True, max_length=255)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=_utc_now)


class AssetModel(SQLModel, table=True):
    """Binary asset (audio or image) held inside the database."""

    __tablename__ = "assets"  # pyright: ignore[reportAssignmentType]

    key: str = Field(primary_key=True, max_length=255)
    kind: str = Field(default="audio", max_length=16)
    data: bytes = Field()
    created_at: datetime = Field(default_factory=_utc_now)


class PendingDeletionModel(SQLModel, table=True):
    """Blob reference whose cleanup has not completed."""

    __tablename__ = "pending_deletions"  # pyright: ignore[reportAssignmentType]

    blob_ref: str = Field(primary_key=True, max_length=1024)
    reason: str = Field(default="", max_length=255)
    attempts: int = Field(default=0)
    last_error: str | None = Field(default=None, max_length=1024)
    created_at: datetime = Field(default_factory=_utc_now)
