"""Tests for BlobCleaner."""

import pytest

from avatarvoice.database import PendingDeletionStore
from avatarvoice.domain.exceptions import BlobError
from avatarvoice.domain_service import BlobCleaner


class FlakyBlobStore:
    """Fails the first ``failures`` deletes of every reference."""

    def __init__(self, failures: int = 0, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error
        self.calls: dict[str, int] = {}

    def put(self, data: bytes, key: str | None = None, kind: str = "audio") -> str:
        raise NotImplementedError

    def owns(self, ref: str) -> bool:
        return not ref.startswith("/")

    def get(self, ref: str) -> bytes | None:
        return None

    def delete(self, ref: str) -> bool:
        self.calls[ref] = self.calls.get(ref, 0) + 1
        if self.calls[ref] <= self.failures:
            if self.error is not None:
                raise self.error
            return False
        return True

    def clear(self) -> None:
        pass


class TestBlobCleaner:
    @pytest.mark.asyncio
    async def test_run_counts_results(self):
        cleaner = BlobCleaner(FlakyBlobStore(), retry_delay=0)

        report = await cleaner.run(["a", "b", "a", ""], "test")

        assert report.requested == 2
        assert report.deleted == 2
        assert report.failed == 0
        assert cleaner.last_report is report

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        store = FlakyBlobStore(failures=2)
        cleaner = BlobCleaner(store, max_attempts=3, retry_delay=0)

        report = await cleaner.run(["a"], "test")

        assert report.deleted == 1
        assert store.calls == {"a": 3}

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        store = FlakyBlobStore(failures=10, error=BlobError("disk gone"))
        cleaner = BlobCleaner(store, max_attempts=2, retry_delay=0)

        report = await cleaner.run(["a"], "test")

        assert report.failed_refs == ["a"]
        assert store.calls == {"a": 2}

    @pytest.mark.asyncio
    async def test_schedule_runs_in_background(self):
        store = FlakyBlobStore()
        cleaner = BlobCleaner(store, retry_delay=0)

        task = cleaner.schedule(["a", "b"], "test")
        assert task is not None
        await cleaner.wait()

        assert cleaner.pending_tasks == 0
        assert set(store.calls) == {"a", "b"}

    def test_schedule_nothing(self):
        cleaner = BlobCleaner(FlakyBlobStore())
        assert cleaner.schedule([], "test") is None

    @pytest.mark.asyncio
    async def test_ledger_tracks_outcome(self, ledger: PendingDeletionStore):
        store = FlakyBlobStore(failures=1)
        cleaner = BlobCleaner(store, ledger=ledger, max_attempts=1, retry_delay=0)

        cleaner.schedule(["a"], "first try")
        await cleaner.wait()

        assert ledger.list_pending() == ["a"]
        assert ledger.attempts("a") == 1

        report = await cleaner.sweep_pending(referenced=set())

        assert report.deleted == 1
        assert ledger.list_pending() == []

    @pytest.mark.asyncio
    async def test_sweep_without_ledger(self):
        cleaner = BlobCleaner(FlakyBlobStore())

        report = await cleaner.sweep_pending(referenced=set())

        assert report.requested == 0
        assert cleaner.schedule_sweep(set()) is None

    @pytest.mark.asyncio
    async def test_foreign_refs_are_left_alone(self, ledger: PendingDeletionStore):
        store = FlakyBlobStore()
        cleaner = BlobCleaner(store, ledger=ledger, retry_delay=0)

        cleaner.schedule(["a", "/picked/photo.png"], "test")
        await cleaner.wait()

        report = cleaner.last_report
        assert report is not None
        assert report.deleted == 1
        assert report.failed == 0
        assert report.skipped_refs == ["/picked/photo.png"]
        assert store.calls == {"a": 1}
        assert ledger.list_pending() == []

    @pytest.mark.asyncio
    async def test_sweep_drops_foreign_entries(self, ledger: PendingDeletionStore):
        ledger.add_many(["/picked/photo.png"], "earlier run")
        store = FlakyBlobStore()
        cleaner = BlobCleaner(store, ledger=ledger, retry_delay=0)

        report = await cleaner.sweep_pending(referenced=set())

        assert report.skipped_refs == ["/picked/photo.png"]
        assert store.calls == {}
        assert ledger.list_pending() == []
