"""Blob storage implementations."""

from avatarvoice.storages.assetdb_storage import ASSETDB_SCHEME, AssetDbStorage
from avatarvoice.storages.local_storage import LocalStorage
from avatarvoice.storages.router import StorageRouter, create_blob_store

__all__ = [
    "ASSETDB_SCHEME",
    "AssetDbStorage",
    "LocalStorage",
    "StorageRouter",
    "create_blob_store",
]
