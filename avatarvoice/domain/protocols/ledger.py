"""Pending deletion ledger protocol."""

from typing import Protocol


class PendingDeletionLedgerProtocol(Protocol):
    """Durable record of blobs whose deletion has not completed yet."""

    def add_many(self, refs: list[str], reason: str) -> None: ...

    def remove(self, ref: str) -> None: ...

    def record_failure(self, ref: str, error: str) -> None: ...

    def list_pending(self) -> list[str]: ...

    def clear(self) -> None: ...
