"""Shared pytest fixtures."""

import threading
from datetime import UTC, datetime
from pathlib import Path

import pytest

from avatarvoice.database import Database, MetadataStore, PendingDeletionStore
from avatarvoice.domain.exceptions import BlobError, PersistenceError
from avatarvoice.domain_service import AvatarRepository, RepositorySettings
from avatarvoice.storages import LocalStorage


class FakeMetadataStore:
    """In-memory metadata store whose saves and loads can be made to fail."""

    def __init__(self, document: str | None = None) -> None:
        self.document = document
        self.synced_at: datetime | None = None
        self.fail_save = False
        # 1-based save call numbers that report failure.
        self.failing_calls: set[int] = set()
        self.fail_load = False
        self.save_calls = 0
        self.quarantined: list[str] = []
        # When set, saves wait until the event is released.
        self.save_gate: threading.Event | None = None

    def save(self, document: str) -> bool:
        self.save_calls += 1
        call = self.save_calls
        if self.save_gate is not None and not self.save_gate.wait(timeout=5):
            return False
        if self.fail_save or call in self.failing_calls:
            return False
        self.document = document
        self.synced_at = datetime.now(UTC)
        return True

    def load(self) -> str | None:
        if self.fail_load:
            raise PersistenceError("load failed")
        return self.document

    def clear(self) -> None:
        self.document = None
        self.synced_at = None

    def last_sync_time(self) -> datetime | None:
        return self.synced_at

    def quarantine_corrupt(self) -> bool:
        if self.document is None:
            return False
        self.quarantined.append(self.document)
        self.document = None
        return True


class RecordingBlobStore:
    """In-memory blob store that records every call."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.put_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.failing_refs: set[str] = set()
        self.fail_put = False
        self._counter = 0

    def put(self, data: bytes, key: str | None = None, kind: str = "audio") -> str:
        if self.fail_put:
            raise BlobError("put failed")
        self._counter += 1
        ref = f"mem://{key or f'{kind}_{self._counter}'}"
        self.blobs[ref] = data
        self.put_calls.append(ref)
        return ref

    def owns(self, ref: str) -> bool:
        return ref.startswith("mem://")

    def get(self, ref: str) -> bytes | None:
        return self.blobs.get(ref)

    def delete(self, ref: str) -> bool:
        self.delete_calls.append(ref)
        if ref in self.failing_refs:
            return False
        self.blobs.pop(ref, None)
        return True

    def clear(self) -> None:
        self.blobs.clear()


@pytest.fixture
def database():
    """Create an in-memory database with all tables."""
    database = Database.in_memory()
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def metadata_store(database: Database) -> MetadataStore:
    return MetadataStore(database)


@pytest.fixture
def ledger(database: Database) -> PendingDeletionStore:
    return PendingDeletionStore(database)


@pytest.fixture
def local_storage(tmp_path: Path) -> LocalStorage:
    """Filesystem blob store under a temporary directory."""
    return LocalStorage(base_path=str(tmp_path / "blobs"))


@pytest.fixture
def fake_metadata() -> FakeMetadataStore:
    return FakeMetadataStore()


@pytest.fixture
def blob_store() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture
def repo_settings() -> RepositorySettings:
    """Fast settings: no retry delay, short timeout."""
    return RepositorySettings(
        storage_timeout=5.0,
        cleanup_max_attempts=2,
        cleanup_retry_delay=0,
        discard_corrupt_record=True,
    )


@pytest.fixture
def repository(
    fake_metadata: FakeMetadataStore,
    blob_store: RecordingBlobStore,
    repo_settings: RepositorySettings,
) -> AvatarRepository:
    """Repository over in-memory fakes (not loaded yet)."""
    return AvatarRepository(fake_metadata, blob_store, settings=repo_settings)
