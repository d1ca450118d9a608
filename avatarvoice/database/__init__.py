"""Database layer."""

from avatarvoice.database.session import Database
from avatarvoice.database.stores import MetadataStore, PendingDeletionStore

__all__ = ["Database", "MetadataStore", "PendingDeletionStore"]
