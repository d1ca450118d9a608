"""Database-backed stores."""

from avatarvoice.database.stores.metadata_store import MetadataStore
from avatarvoice.database.stores.pending_deletion_store import PendingDeletionStore

__all__ = ["MetadataStore", "PendingDeletionStore"]
