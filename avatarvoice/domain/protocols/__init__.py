"""Domain protocols."""

from avatarvoice.domain.protocols.blob_store import BlobKind, BlobStoreProtocol
from avatarvoice.domain.protocols.ledger import PendingDeletionLedgerProtocol
from avatarvoice.domain.protocols.metadata_store import MetadataStoreProtocol

__all__ = [
    "BlobKind",
    "BlobStoreProtocol",
    "MetadataStoreProtocol",
    "PendingDeletionLedgerProtocol",
]
