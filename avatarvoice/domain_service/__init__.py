"""Domain service layer."""

from avatarvoice.domain_service.avatar_repository import (
    AvatarRepository,
    RepositoryState,
)
from avatarvoice.domain_service.blob_cleaner import BlobCleaner, CleanupReport
from avatarvoice.domain_service.settings import RepositorySettings

__all__ = [
    "AvatarRepository",
    "RepositoryState",
    "BlobCleaner",
    "CleanupReport",
    "RepositorySettings",
]
