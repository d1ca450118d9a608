"""Metadata store: the avatar collection document in the preference table."""

import logging
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from avatarvoice.database.models import PreferenceModel
from avatarvoice.database.session import Database
from avatarvoice.database.settings import settings
from avatarvoice.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


class MetadataStore:
    """Store for the serialized avatar collection.

    Implements MetadataStoreProtocol from avatarvoice.domain.protocols.
    """

    def __init__(
        self,
        database: Database,
        document_key: str = settings.document_key,
        sync_key: str = settings.sync_key,
    ) -> None:
        """Initialize store.

        Args:
            database: Database handle
            document_key: Preference key holding the collection document
            sync_key: Preference key holding the last sync timestamp
        """
        self.database = database
        self.document_key = document_key
        self.sync_key = sync_key

    @staticmethod
    def _put(session: Session, key: str, value: str, now: datetime) -> None:
        model = session.get(PreferenceModel, key)
        if model is None:
            model = PreferenceModel(key=key, value=value, updated_at=now)
        else:
            model.value = value
            model.updated_at = now
        session.add(model)

    @staticmethod
    def _delete(session: Session, key: str) -> None:
        model = session.get(PreferenceModel, key)
        if model is not None:
            session.delete(model)

    def save(self, document: str) -> bool:
        """Write the document and the sync timestamp in one transaction.

        Args:
            document: Serialized collection

        Returns:
            True if both rows were committed, False otherwise
        """
        now = datetime.now(UTC)
        try:
            with self.database.session() as session:
                self._put(session, self.document_key, document, now)
                self._put(session, self.sync_key, now.isoformat(), now)
                session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to save collection document")
            return False
        logger.debug(
            "Saved collection document (%d chars) to key %r",
            len(document),
            self.document_key,
        )
        return True

    def load(self) -> str | None:
        """Read the stored document.

        Returns:
            The document, or None when no record exists

        Raises:
            PersistenceError: If the store could not be read
        """
        try:
            with self.database.session() as session:
                model = session.get(PreferenceModel, self.document_key)
                value = model.value if model is not None else None
        except SQLAlchemyError as e:
            logger.exception("Failed to load collection document")
            raise PersistenceError(f"Failed to load collection document: {e}") from e
        if value is None:
            logger.debug("No collection document under key %r", self.document_key)
        return value

    def clear(self) -> None:
        """Remove the document and the sync timestamp.

        Raises:
            PersistenceError: If the rows could not be removed
        """
        try:
            with self.database.session() as session:
                self._delete(session, self.document_key)
                self._delete(session, self.sync_key)
                session.commit()
        except SQLAlchemyError as e:
            logger.exception("Failed to clear collection document")
            raise PersistenceError(f"Failed to clear collection document: {e}") from e

    def last_sync_time(self) -> datetime | None:
        """Timestamp of the last successful save, if any."""
        try:
            with self.database.session() as session:
                model = session.get(PreferenceModel, self.sync_key)
                value = model.value if model is not None else None
        except SQLAlchemyError:
            logger.exception("Failed to read last sync time")
            return None
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning("Ignoring unparseable sync time %r", value)
            return None

    def quarantine_corrupt(self) -> bool:
        """Move the current document under ``<key>.corrupt``.

        Returns:
            True if a document was moved aside
        """
        now = datetime.now(UTC)
        try:
            with self.database.session() as session:
                model = session.get(PreferenceModel, self.document_key)
                if model is None:
                    return False
                self._put(session, self.document_key + CORRUPT_SUFFIX, model.value, now)
                session.delete(model)
                session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to quarantine corrupt collection document")
            return False
        logger.warning(
            "Moved corrupt collection document to key %r",
            self.document_key + CORRUPT_SUFFIX,
        )
        return True
