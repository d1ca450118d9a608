from datetime import UTC, datetime

import pytest
from sqlmodel import SQLModel

from avatarvoice.database import Database, MetadataStore
from avatarvoice.database.models import PreferenceModel
from avatarvoice.database.stores.metadata_store import CORRUPT_SUFFIX
from avatarvoice.domain.exceptions import PersistenceError


class TestMetadataStore:
    """Tests for the preference-table metadata store."""

    def test_load_without_record(self, metadata_store: MetadataStore):
        assert metadata_store.load() is None
        assert metadata_store.last_sync_time() is None

    def test_save_and_load(self, metadata_store: MetadataStore):
        before = datetime.now(UTC)

        assert metadata_store.save('[{"id": "a"}]') is True

        assert metadata_store.load() == '[{"id": "a"}]'
        synced = metadata_store.last_sync_time()
        assert synced is not None
        assert synced >= before

    def test_save_overwrites(self, metadata_store: MetadataStore):
        metadata_store.save("[1]")
        metadata_store.save("[2]")
        assert metadata_store.load() == "[2]"

    def test_clear(self, metadata_store: MetadataStore):
        metadata_store.save("[]")

        metadata_store.clear()

        assert metadata_store.load() is None
        assert metadata_store.last_sync_time() is None

    def test_custom_keys(self, database: Database):
        first = MetadataStore(database, document_key="one", sync_key="one_sync")
        second = MetadataStore(database, document_key="two", sync_key="two_sync")

        first.save("[1]")

        assert second.load() is None
        assert first.load() == "[1]"

    def test_unparseable_sync_time(self, database: Database, metadata_store: MetadataStore):
        with database.session() as session:
            session.add(PreferenceModel(key=metadata_store.sync_key, value="yesterday"))
            session.commit()

        assert metadata_store.last_sync_time() is None

    def test_quarantine_corrupt(self, database: Database, metadata_store: MetadataStore):
        metadata_store.save("{not json")

        assert metadata_store.quarantine_corrupt() is True

        assert metadata_store.load() is None
        with database.session() as session:
            moved = session.get(
                PreferenceModel, metadata_store.document_key + CORRUPT_SUFFIX
            )
            assert moved is not None
            assert moved.value == "{not json"

    def test_quarantine_without_document(self, metadata_store: MetadataStore):
        assert metadata_store.quarantine_corrupt() is False

    def test_save_failure_returns_false(self, metadata_store: MetadataStore):
        metadata_store.save("[1]")
        SQLModel.metadata.drop_all(metadata_store.database.engine)

        assert metadata_store.save("[2]") is False

    def test_load_failure_raises(self, metadata_store: MetadataStore):
        SQLModel.metadata.drop_all(metadata_store.database.engine)

        with pytest.raises(PersistenceError):
            metadata_store.load()
