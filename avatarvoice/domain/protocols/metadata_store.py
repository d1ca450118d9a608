"""Metadata store protocol."""

from datetime import datetime
from typing import Protocol


class MetadataStoreProtocol(Protocol):
    """Holds the serialized avatar collection under a single key."""

    def save(self, document: str) -> bool:
        """Write the document and the sync timestamp atomically.

        Returns:
            True on success; on failure nothing is changed
        """
        ...

    def load(self) -> str | None:
        """Return the stored document, or None when no record exists."""
        ...

    def clear(self) -> None:
        """Remove the document and the sync timestamp."""
        ...

    def last_sync_time(self) -> datetime | None:
        """Return when the document was last saved successfully."""
        ...

    def quarantine_corrupt(self) -> bool:
        """Move an undecodable document aside so later loads start clean."""
        ...
