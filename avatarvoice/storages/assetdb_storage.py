"""Blob store inside the embedded database (the assets table)."""

import logging
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from avatarvoice.database.models import AssetModel
from avatarvoice.database.session import Database
from avatarvoice.domain.exceptions import BlobError
from avatarvoice.domain.protocols import BlobKind

logger = logging.getLogger(__name__)

ASSETDB_SCHEME = "assetdb://"


def to_ref(key: str) -> str:
    return f"{ASSETDB_SCHEME}{key}"


def to_key(ref: str) -> str:
    return ref[len(ASSETDB_SCHEME) :] if ref.startswith(ASSETDB_SCHEME) else ref


class AssetDbStorage:
    """Blob store keeping bytes in the ``assets`` table.

    References are ``assetdb://<key>``; generated keys are ``audio_<uuid>``
    or ``image_<uuid>``.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def put(self, data: bytes, key: str | None = None, kind: BlobKind = "audio") -> str:
        """Insert or overwrite an asset.

        Raises:
            BlobError: If the asset could not be written
        """
        key = to_key(key) if key else f"{kind}_{uuid4()}"
        try:
            with self.database.session() as session:
                model = session.get(AssetModel, key)
                if model is None:
                    model = AssetModel(key=key, kind=kind, data=data)
                else:
                    model.data = data
                    model.kind = kind
                session.add(model)
                session.commit()
        except SQLAlchemyError as e:
            logger.exception("Error saving asset %s", key)
            raise BlobError(f"Failed to save asset {key}: {e}") from e
        logger.debug("Saved asset with key: %s", key)
        return to_ref(key)

    def owns(self, ref: str) -> bool:
        return ref.startswith(ASSETDB_SCHEME)

    def get(self, ref: str) -> bytes | None:
        """Load an asset, or None when missing or not binary."""
        key = to_key(ref)
        try:
            with self.database.session() as session:
                model = session.get(AssetModel, key)
                value = model.data if model is not None else None
        except SQLAlchemyError:
            logger.exception("Error loading asset %s", key)
            return None
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value)
        return None

    def delete(self, ref: str) -> bool:
        """Delete an asset. Absent keys count as deleted."""
        key = to_key(ref)
        try:
            with self.database.session() as session:
                model = session.get(AssetModel, key)
                if model is not None:
                    session.delete(model)
                    session.commit()
        except SQLAlchemyError:
            logger.exception("Error deleting asset %s", key)
            return False
        logger.debug("Deleted asset with key: %s", key)
        return True

    def keys(self) -> list[str]:
        """All stored keys."""
        with self.database.session() as session:
            return list(session.exec(select(AssetModel.key)).all())

    def clear(self) -> None:
        """Delete every asset.

        Raises:
            BlobError: If the table could not be emptied
        """
        try:
            with self.database.session() as session:
                for model in session.exec(select(AssetModel)).all():
                    session.delete(model)
                session.commit()
        except SQLAlchemyError as e:
            logger.exception("Error clearing assets")
            raise BlobError(f"Failed to clear assets: {e}") from e
        logger.info("Cleared all assets.")
