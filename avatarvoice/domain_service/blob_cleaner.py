"""Background blob cleanup for two-phase deletion.

Metadata is authoritative: a removal is committed once the collection
document is saved. Deleting the removed blobs happens afterwards, detached
from the caller, with a bounded number of retries. References are kept in a
durable ledger until their blob is gone so a later start can sweep them.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from avatarvoice.domain.exceptions import BlobError, PersistenceError
from avatarvoice.domain.protocols import BlobStoreProtocol, PendingDeletionLedgerProtocol
from avatarvoice.domain_service.io import run_blocking

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    """Result of one cleanup run."""

    reason: str
    requested: int = 0
    deleted: int = 0
    failed_refs: list[str] = field(default_factory=list)
    # References that no configured store owns; never deleted or retried.
    skipped_refs: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_refs)


class BlobCleaner:
    """Deletes orphaned blobs in the background."""

    def __init__(
        self,
        blob_store: BlobStoreProtocol,
        ledger: PendingDeletionLedgerProtocol | None = None,
        max_attempts: int = 3,
        retry_delay: float = 0.5,
        timeout: float | None = None,
    ) -> None:
        """Initialize cleaner.

        Args:
            blob_store: Store the orphaned blobs live in
            ledger: Optional durable ledger of pending deletions
            max_attempts: Tries per blob before giving up for this run
            retry_delay: Seconds between tries (doubled after each failure)
            timeout: Seconds allowed per delete call
        """
        self.blob_store = blob_store
        self.ledger = ledger
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.last_report: CleanupReport | None = None
        self._tasks: set[asyncio.Task[CleanupReport]] = set()

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def schedule(self, refs: Iterable[str], reason: str) -> asyncio.Task[CleanupReport] | None:
        """Start cleanup without waiting for it.

        Returns:
            The background task, or None when there is nothing to delete
        """
        refs = [ref for ref in dict.fromkeys(refs) if ref]
        if not refs:
            return None
        task = asyncio.create_task(self.run(refs, reason, record=True))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(
        self, refs: Iterable[str], reason: str, record: bool = False
    ) -> CleanupReport:
        """Delete every reference, counting successes and failures.

        Args:
            refs: Blob references to delete
            reason: Short description used in logs and the ledger
            record: Write the references to the ledger before deleting
        """
        refs = [ref for ref in dict.fromkeys(refs) if ref]
        report = CleanupReport(reason=reason, requested=len(refs))
        owned = []
        for ref in refs:
            if self.blob_store.owns(ref):
                owned.append(ref)
            else:
                report.skipped_refs.append(ref)
        if report.skipped_refs:
            logger.info(
                "Blob cleanup (%s): leaving %d blobs outside the store: %s",
                reason,
                len(report.skipped_refs),
                report.skipped_refs,
            )
            if not record:
                for ref in report.skipped_refs:
                    await self._ledger_call("remove", ref)
        if record and owned:
            await self._ledger_call("add_many", owned, reason)

        for ref in owned:
            error = await self._delete_with_retry(ref)
            if error is None:
                report.deleted += 1
                await self._ledger_call("remove", ref)
            else:
                report.failed_refs.append(ref)
                await self._ledger_call("record_failure", ref, error)

        self.last_report = report
        if report.failed:
            logger.warning(
                "Blob cleanup (%s): %d deleted, %d failed: %s",
                reason,
                report.deleted,
                report.failed,
                report.failed_refs,
            )
        else:
            logger.info("Blob cleanup (%s): %d deleted", reason, report.deleted)
        return report

    async def sweep_pending(self, referenced: set[str]) -> CleanupReport:
        """Retry ledger entries left over from earlier runs.

        Entries whose blob is referenced by the live collection are dropped
        from the ledger without touching the blob.
        """
        if self.ledger is None:
            return CleanupReport(reason="sweep")
        try:
            pending = await run_blocking(self.ledger.list_pending)
        except PersistenceError:
            logger.warning("Could not read pending deletion ledger", exc_info=True)
            return CleanupReport(reason="sweep")

        orphans: list[str] = []
        for ref in pending:
            if ref in referenced:
                logger.info("Pending deletion %s is referenced again; dropping", ref)
                await self._ledger_call("remove", ref)
            else:
                orphans.append(ref)
        return await self.run(orphans, "sweep")

    def schedule_sweep(self, referenced: set[str]) -> asyncio.Task[CleanupReport] | None:
        """Run ``sweep_pending`` in the background."""
        if self.ledger is None:
            return None
        task = asyncio.create_task(self.sweep_pending(referenced))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait(self) -> None:
        """Wait until every scheduled cleanup has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _delete_with_retry(self, ref: str) -> str | None:
        """Delete one blob.

        Returns:
            None on success, otherwise the last error description
        """
        delay = self.retry_delay
        error = "delete reported failure"
        for attempt in range(1, self.max_attempts + 1):
            try:
                if await run_blocking(self.blob_store.delete, ref, timeout=self.timeout):
                    return None
                error = "delete reported failure"
            except TimeoutError:
                error = "delete timed out"
            except (BlobError, OSError) as e:
                error = str(e) or type(e).__name__
            logger.debug("Deleting %s failed (attempt %d): %s", ref, attempt, error)
            if attempt < self.max_attempts and delay > 0:
                await asyncio.sleep(delay)
                delay *= 2
        return error

    async def _ledger_call(self, method: str, *args: object) -> None:
        if self.ledger is None:
            return
        try:
            await run_blocking(getattr(self.ledger, method), *args)
        except PersistenceError:
            logger.warning("Pending deletion ledger %s failed", method, exc_info=True)
