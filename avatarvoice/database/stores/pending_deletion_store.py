"""Durable ledger of blob deletions that have not completed."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from avatarvoice.database.models import PendingDeletionModel
from avatarvoice.database.session import Database
from avatarvoice.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class PendingDeletionStore:
    """Implements PendingDeletionLedgerProtocol on the pending_deletions table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def add_many(self, refs: list[str], reason: str) -> None:
        """Record references awaiting deletion. Existing entries are kept.

        Raises:
            PersistenceError: If the ledger could not be written
        """
        if not refs:
            return
        try:
            with self.database.session() as session:
                for ref in dict.fromkeys(refs):
                    if session.get(PendingDeletionModel, ref) is None:
                        session.add(PendingDeletionModel(blob_ref=ref, reason=reason))
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record pending deletions: {e}") from e

    def remove(self, ref: str) -> None:
        """Forget a reference once its blob is gone."""
        try:
            with self.database.session() as session:
                model = session.get(PendingDeletionModel, ref)
                if model is not None:
                    session.delete(model)
                    session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to remove pending deletion: {e}") from e

    def record_failure(self, ref: str, error: str) -> None:
        """Count a failed attempt so the entry can be retried later."""
        try:
            with self.database.session() as session:
                model = session.get(PendingDeletionModel, ref)
                if model is None:
                    model = PendingDeletionModel(blob_ref=ref)
                model.attempts += 1
                model.last_error = error[:1024]
                session.add(model)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record deletion failure: {e}") from e

    def list_pending(self) -> list[str]:
        """All pending references, oldest first."""
        try:
            with self.database.session() as session:
                statement = select(PendingDeletionModel).order_by(
                    PendingDeletionModel.created_at  # type: ignore[arg-type]
                )
                return [model.blob_ref for model in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list pending deletions: {e}") from e

    def attempts(self, ref: str) -> int:
        """Number of failed attempts recorded for a reference."""
        try:
            with self.database.session() as session:
                model = session.get(PendingDeletionModel, ref)
                return model.attempts if model is not None else 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read pending deletion: {e}") from e

    def clear(self) -> None:
        """Drop every entry."""
        try:
            with self.database.session() as session:
                for model in session.exec(select(PendingDeletionModel)).all():
                    session.delete(model)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to clear pending deletions: {e}") from e
