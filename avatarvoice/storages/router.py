"""Reference-based dispatch across blob stores."""

import logging

from avatarvoice.database.session import Database
from avatarvoice.domain.protocols import BlobKind, BlobStoreProtocol
from avatarvoice.storages.assetdb_storage import ASSETDB_SCHEME, AssetDbStorage
from avatarvoice.storages.local_storage import LocalStorage
from avatarvoice.storages.settings import StorageSettings
from avatarvoice.storages.settings import settings as default_settings

logger = logging.getLogger(__name__)

STORAGE_TYPES = ("local", "assetdb")


class StorageRouter:
    """Single blob store facade over the filesystem and asset database stores.

    Writes go to the primary store. Reads and deletes are routed by looking
    at the reference: ``assetdb://`` keys belong to the asset database,
    anything else is a filesystem path. Callers never branch on which store
    is active.
    """

    def __init__(
        self,
        primary: str,
        local: LocalStorage | None = None,
        assetdb: AssetDbStorage | None = None,
    ) -> None:
        if primary not in STORAGE_TYPES:
            raise ValueError(
                f"Unknown storage_type {primary!r}; expected one of {STORAGE_TYPES}"
            )
        stores: dict[str, BlobStoreProtocol | None] = {"local": local, "assetdb": assetdb}
        if stores[primary] is None:
            raise ValueError(f"storage_type {primary!r} selected but not configured")
        self.primary = primary
        self.local = local
        self.assetdb = assetdb

    def _store_for(self, ref: str) -> BlobStoreProtocol | None:
        if ref.startswith(ASSETDB_SCHEME):
            return self.assetdb
        return self.local

    def put(self, data: bytes, key: str | None = None, kind: BlobKind = "audio") -> str:
        """Store bytes in the primary store."""
        store = self.assetdb if self.primary == "assetdb" else self.local
        assert store is not None
        return store.put(data, key=key, kind=kind)

    def owns(self, ref: str) -> bool:
        """Whether a configured store is responsible for ``ref``."""
        store = self._store_for(ref)
        return store is not None and store.owns(ref)

    def get(self, ref: str) -> bytes | None:
        """Read bytes from whichever store owns ``ref``."""
        store = self._store_for(ref)
        if store is None:
            logger.warning("No blob store configured for %s", ref)
            return None
        return store.get(ref)

    def delete(self, ref: str) -> bool:
        """Delete from whichever store owns ``ref``."""
        store = self._store_for(ref)
        if store is None:
            logger.warning("No blob store configured for %s", ref)
            return False
        return store.delete(ref)

    def clear(self) -> None:
        """Clear every configured store."""
        for store in (self.local, self.assetdb):
            if store is not None:
                store.clear()


def create_blob_store(
    database: Database | None = None,
    settings: StorageSettings | None = None,
) -> StorageRouter:
    """Build the blob store for the current environment.

    The filesystem store is always available for native paths; the asset
    database store is added whenever a database is supplied.

    Raises:
        ValueError: If storage_type is unknown or needs a missing database
    """
    settings = settings or default_settings
    if settings.storage_type not in STORAGE_TYPES:
        raise ValueError(
            f"Unknown storage_type {settings.storage_type!r}; "
            f"expected one of {STORAGE_TYPES}"
        )
    if settings.storage_type == "assetdb" and database is None:
        raise ValueError("A database is required when storage_type is 'assetdb'")

    local = LocalStorage(
        base_path=settings.base_path,
        audio_dir_name=settings.audio_dir_name,
        image_dir_name=settings.image_dir_name,
    )
    assetdb = AssetDbStorage(database) if database is not None else None
    return StorageRouter(primary=settings.storage_type, local=local, assetdb=assetdb)
