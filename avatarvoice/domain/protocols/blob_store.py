"""Blob store protocol."""

from typing import Literal, Protocol

BlobKind = Literal["audio", "image"]


class BlobStoreProtocol(Protocol):
    """Storage for audio and image bytes, addressed by an opaque reference."""

    def put(self, data: bytes, key: str | None = None, kind: BlobKind = "audio") -> str:
        """Store bytes.

        Args:
            data: Raw bytes
            key: Optional key; a collision-resistant one is generated when omitted
            kind: Asset type, used for key prefixes and directory layout

        Returns:
            The reference under which the bytes can be read back
        """
        ...

    def owns(self, ref: str) -> bool:
        """Whether ``ref`` points into this store.

        Blobs outside the store (for example a picked file that was never
        copied in) are never deleted by it.
        """
        ...

    def get(self, ref: str) -> bytes | None:
        """Read bytes back, or None when missing or unreadable."""
        ...

    def delete(self, ref: str) -> bool:
        """Delete a blob. Deleting an absent blob succeeds."""
        ...

    def clear(self) -> None:
        """Remove every blob owned by this store."""
        ...
