"""Avatar repository: the in-memory collection and its persistence protocol.

The repository owns the authoritative collection. Every mutation follows the
same shape:

1. Validate arguments.
2. Under the write lock, look up the target record and apply a
   copy-on-write change in memory.
3. Still under the lock, save the whole collection document to the
   metadata store.
4. On save failure, restore the touched record and raise PersistenceError.
5. On success, hand orphaned blobs to the background cleaner and notify
   observers.

The collection is persisted as one document, so writes are single-writer:
a save only ever contains committed changes plus the change being saved.

Blob cleanup only ever starts after the metadata save succeeded, so the
durable document never refers to deleted blobs; a failed cleanup leaves
bytes behind but never resurrects a record.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta
from enum import Enum
from uuid import uuid4

from avatarvoice.domain.codec import decode_avatars, encode_avatars
from avatarvoice.domain.exceptions import (
    BlobError,
    DecodeError,
    DeletionInProgressError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    RepositoryStateError,
)
from avatarvoice.domain.models import (
    AVATAR_COLORS,
    DEFAULT_CATEGORY,
    Avatar,
    AvatarIcon,
    Voice,
)
from avatarvoice.domain.protocols import (
    BlobStoreProtocol,
    MetadataStoreProtocol,
    PendingDeletionLedgerProtocol,
)
from avatarvoice.domain.queries import (
    CollectionStats,
    SearchResult,
    VoiceMatch,
    category_counts,
    collection_stats,
    most_used,
    recently_used,
    search,
)
from avatarvoice.domain_service.blob_cleaner import BlobCleaner, CleanupReport
from avatarvoice.domain_service.io import run_blocking
from avatarvoice.domain_service.settings import RepositorySettings
from avatarvoice.domain_service.settings import settings as default_settings

logger = logging.getLogger(__name__)

Observer = Callable[[tuple[Avatar, ...]], None]


class RepositoryState(Enum):
    """Load lifecycle of a repository."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def _require_name(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{what} must not be empty")
    return value.strip()


def _require_color(color: str | None) -> None:
    if color is not None and color not in AVATAR_COLORS:
        raise InvalidArgumentError(f"Unknown color: {color}")


class AvatarRepository:
    """Consistency manager for the avatar collection."""

    def __init__(
        self,
        metadata_store: MetadataStoreProtocol,
        blob_store: BlobStoreProtocol,
        ledger: PendingDeletionLedgerProtocol | None = None,
        settings: RepositorySettings | None = None,
    ) -> None:
        """Initialize repository.

        Args:
            metadata_store: Store for the serialized collection
            blob_store: Store for audio and image bytes
            ledger: Optional durable ledger for pending blob deletions
            settings: Timeouts, retry policy and load behaviour
        """
        self.metadata_store = metadata_store
        self.blob_store = blob_store
        self.settings = settings or default_settings
        self.cleaner = BlobCleaner(
            blob_store,
            ledger=ledger,
            max_attempts=self.settings.cleanup_max_attempts,
            retry_delay=self.settings.cleanup_retry_delay,
            timeout=self.settings.storage_timeout,
        )

        self.state = RepositoryState.IDLE
        self.load_error: Exception | None = None
        self._avatars: list[Avatar] = []
        self._selected_id: str | None = None
        self._deleting = False
        self._observers: list[Observer] = []

        # Held from lookup through save and rollback of every mutation.
        self._write_lock = asyncio.Lock()

    # --- Read access ---

    @property
    def avatars(self) -> tuple[Avatar, ...]:
        """Snapshot of the collection."""
        return tuple(self._avatars)

    @property
    def is_deleting(self) -> bool:
        return self._deleting

    @property
    def selected_avatar(self) -> Avatar | None:
        if self._selected_id is None:
            return None
        index = self._find_index(self._selected_id)
        return self._avatars[index] if index >= 0 else None

    def get_avatar(self, avatar_id: str) -> Avatar:
        """Get an avatar by id.

        Raises:
            NotFoundError: If no avatar has this id
        """
        return self._avatars[self._index_of(avatar_id)]

    def get_voice(self, avatar_id: str, voice_id: str) -> Voice:
        """Get a voice of an avatar.

        Raises:
            NotFoundError: If the avatar or the voice does not exist
        """
        voice = self.get_avatar(avatar_id).find_voice(voice_id)
        if voice is None:
            raise NotFoundError("Voice", voice_id)
        return voice

    async def get_audio(self, avatar_id: str, voice_id: str) -> bytes | None:
        """Read a voice's audio bytes from the blob store."""
        voice = self.get_voice(avatar_id, voice_id)
        try:
            return await self._io(self.blob_store.get, voice.audio_url)
        except TimeoutError:
            logger.warning("Timed out reading audio %s", voice.audio_url)
            return None

    async def last_sync_time(self) -> datetime | None:
        """When the collection was last persisted."""
        return await self._io(self.metadata_store.last_sync_time)

    # --- Queries ---

    def search(self, query: str) -> SearchResult:
        return search(self._avatars, query)

    def most_used(self, limit: int | None = 10) -> list[VoiceMatch]:
        return most_used(self._avatars, limit)

    def recently_used(self, limit: int | None = 10) -> list[VoiceMatch]:
        return recently_used(self._avatars, limit)

    def stats(self) -> CollectionStats:
        return collection_stats(self._avatars)

    def category_counts(self) -> dict[str, int]:
        return category_counts(self._avatars)

    # --- Change notification ---

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register a callback run with the new snapshot after every change.

        Returns:
            A function that removes the callback
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.avatars
        for callback in list(self._observers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Observer %r failed", callback)

    # --- Loading ---

    async def load_all(self) -> tuple[Avatar, ...]:
        """Load the collection from the metadata store.

        Never raises for storage or decode problems: the collection falls
        back to empty and ``state`` becomes ERROR with ``load_error`` set.
        """
        async with self._write_lock:
            self.state = RepositoryState.LOADING
            self.load_error = None
            try:
                document = await self._io(self.metadata_store.load)
                result = decode_avatars(document)
            except DecodeError as e:
                logger.error("Stored collection is corrupt: %s", e)
                self._avatars = []
                self.load_error = e
                self.state = RepositoryState.ERROR
            except (PersistenceError, TimeoutError) as e:
                logger.error("Could not read stored collection: %s", e)
                self._avatars = []
                self.load_error = (
                    e
                    if isinstance(e, PersistenceError)
                    else PersistenceError("Timed out reading avatar collection")
                )
                self.state = RepositoryState.ERROR
            else:
                self._avatars = self._dedupe(result.avatars)
                self.state = RepositoryState.READY
                logger.info(
                    "Loaded %d avatars (%d records skipped)",
                    len(self._avatars),
                    result.skipped,
                )
                self.cleaner.schedule_sweep(self._referenced())

            if (
                isinstance(self.load_error, DecodeError)
                and self.settings.discard_corrupt_record
            ):
                try:
                    await self._io(self.metadata_store.quarantine_corrupt)
                except TimeoutError:
                    logger.warning("Timed out moving corrupt collection aside")

            self._selected_id = None
        self._notify()
        return self.avatars

    @staticmethod
    def _dedupe(avatars: list[Avatar]) -> list[Avatar]:
        seen: set[str] = set()
        unique: list[Avatar] = []
        for avatar in avatars:
            if avatar.id in seen:
                logger.warning("Dropping duplicate avatar id %s", avatar.id)
                continue
            seen.add(avatar.id)
            voice_ids: set[str] = set()
            voices = []
            for voice in avatar.voices:
                if voice.id in voice_ids:
                    logger.warning("Dropping duplicate voice id %s", voice.id)
                    continue
                voice_ids.add(voice.id)
                voices.append(voice)
            if len(voices) != len(avatar.voices):
                avatar = avatar.with_voices(voices)
            unique.append(avatar)
        return unique

    # --- Avatar mutations ---

    def select_avatar(self, avatar_id: str | None) -> Avatar | None:
        """Set (or clear with None) the selected avatar."""
        avatar = self.get_avatar(avatar_id) if avatar_id is not None else None
        self._selected_id = avatar_id
        self._notify()
        return avatar

    async def add_avatar(
        self,
        name: str,
        icon: AvatarIcon | None = None,
        color: str | None = None,
        image_path: str | None = None,
    ) -> Avatar:
        """Create an avatar and persist it.

        Raises:
            InvalidArgumentError: If the name is blank or the colour unknown
            PersistenceError: If the collection could not be saved; the new
                avatar is not kept
        """
        name = _require_name(name, "Avatar name")
        _require_color(color)
        self._ensure_writable()

        avatar = Avatar(
            name=name, icon=icon or AvatarIcon.default(), image_path=image_path
        )
        if color is not None:
            avatar = replace(avatar, color=color)

        async with self._write_lock:
            self._avatars.append(avatar)
            try:
                await self._persist()
            except PersistenceError:
                self._discard(avatar.id)
                raise

        logger.info("Added avatar %s (%s)", avatar.id, avatar.name)
        self._notify()
        return avatar

    async def save_avatar_image(self, data: bytes, file_name: str | None = None) -> str:
        """Store image bytes and return the reference for ``image_path``.

        Raises:
            BlobError: If the image could not be stored
        """
        key = f"{uuid4().hex}_{file_name}" if file_name else None
        return await self._put_blob(data, key, "image")

    async def update_avatar(
        self,
        avatar_id: str,
        name: str | None = None,
        color: str | None = None,
        icon: AvatarIcon | None = None,
        image_path: str | None = None,
        clear_image: bool = False,
    ) -> Avatar:
        """Change avatar fields. Fields left as None keep their value.

        Args:
            clear_image: Remove the custom image (``image_path`` is ignored)

        Raises:
            NotFoundError: If the avatar does not exist
            InvalidArgumentError: If the new name is blank or the colour unknown
            PersistenceError: If the save failed; the avatar is restored to
                its previous value first
        """
        if name is not None:
            name = _require_name(name, "Avatar name")
        _require_color(color)
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            updated = replace(
                previous,
                name=name if name is not None else previous.name,
                color=color if color is not None else previous.color,
                icon=icon if icon is not None else previous.icon,
                image_path=(
                    None
                    if clear_image
                    else image_path
                    if image_path is not None
                    else previous.image_path
                ),
            )
            self._avatars[index] = updated
            await self._persist_or_restore(previous)
            orphans = (
                self._orphaned([previous.image_path])
                if previous.image_path != updated.image_path
                else []
            )

        self.cleaner.schedule(orphans, f"image of avatar {avatar_id} replaced")
        self._notify()
        return updated

    async def remove_avatar(self, avatar_id: str) -> Avatar:
        """Remove an avatar, then delete its blobs in the background.

        Raises:
            DeletionInProgressError: If another deletion is running
            NotFoundError: If the avatar does not exist
            PersistenceError: If the save failed; the avatar is put back at
                its original position and no blob is touched
        """
        self._ensure_writable()
        self._begin_deletion()
        try:
            async with self._write_lock:
                index = self._index_of(avatar_id)
                removed = self._avatars.pop(index)
                previous_selection = self._selected_id
                if self._selected_id == avatar_id:
                    self._selected_id = None
                try:
                    await self._persist()
                except PersistenceError:
                    self._avatars.insert(index, removed)
                    self._selected_id = previous_selection
                    logger.warning("Restored avatar %s after failed save", avatar_id)
                    raise
                orphans = self._orphaned(removed.blob_refs())
        finally:
            self._deleting = False

        logger.info("Removed avatar %s with %d voices", avatar_id, len(removed.voices))
        self.cleaner.schedule(orphans, f"avatar {avatar_id} removed")
        self._notify()
        return removed

    async def delete_all(self) -> int:
        """Remove every avatar, then delete all their blobs in the background.

        Returns:
            Number of avatars removed

        Raises:
            DeletionInProgressError: If another deletion is running
            PersistenceError: If the save failed; the collection is restored
        """
        self._ensure_writable()
        self._begin_deletion()
        try:
            async with self._write_lock:
                previous = list(self._avatars)
                previous_selection = self._selected_id
                refs = [ref for avatar in previous for ref in avatar.blob_refs()]
                self._avatars = []
                self._selected_id = None
                try:
                    await self._persist()
                except PersistenceError:
                    self._avatars = previous
                    self._selected_id = previous_selection
                    logger.warning(
                        "Restored %d avatars after failed save", len(previous)
                    )
                    raise
        finally:
            self._deleting = False

        logger.info(
            "Deleted all %d avatars (%d blobs to clean up)", len(previous), len(refs)
        )
        self.cleaner.schedule(refs, "delete all")
        self._notify()
        return len(previous)

    async def reset_storage(self) -> bool:
        """Wipe the metadata record, every blob and the pending ledger.

        Returns:
            True when blobs and ledger were cleared too; the metadata record
            is always cleared when this returns

        Raises:
            DeletionInProgressError: If another deletion is running
            PersistenceError: If the metadata record could not be cleared;
                nothing in memory changes
        """
        self._begin_deletion()
        try:
            async with self._write_lock:
                try:
                    await self._io(self.metadata_store.clear)
                except TimeoutError as e:
                    raise PersistenceError("Timed out clearing collection") from e
                self._avatars = []
                self._selected_id = None

                complete = True
                try:
                    await self._io(self.blob_store.clear)
                except (BlobError, OSError, TimeoutError):
                    logger.warning("Failed to clear blob store", exc_info=True)
                    complete = False
                if self.cleaner.ledger is not None:
                    try:
                        await self._io(self.cleaner.ledger.clear)
                    except (PersistenceError, TimeoutError):
                        logger.warning("Failed to clear pending ledger", exc_info=True)
                        complete = False
        finally:
            self._deleting = False

        if self.state is RepositoryState.ERROR:
            self.state = RepositoryState.READY
            self.load_error = None
        logger.info("Storage reset (complete=%s)", complete)
        self._notify()
        return complete

    async def discard_blobs(self, refs: list[str], reason: str) -> CleanupReport:
        """Delete blobs that were stored but never became referenced."""
        return await self.cleaner.run(refs, reason)

    # --- Voice mutations ---

    async def add_voice(self, avatar_id: str, voice: Voice) -> Voice:
        """Append a voice whose audio is already stored.

        Raises:
            NotFoundError: If the avatar does not exist
            InvalidArgumentError: If the voice has no name or audio
                reference, or its id is already used by this avatar
            PersistenceError: If the save failed; the voice is not kept
        """
        _require_name(voice.name, "Voice name")
        if not voice.audio_url:
            raise InvalidArgumentError("Voice audio reference must not be empty")
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            if previous.find_voice(voice.id) is not None:
                raise InvalidArgumentError(f"Voice id already used: {voice.id}")
            self._avatars[index] = previous.with_voices([*previous.voices, voice])
            await self._persist_or_restore(previous)

        self._notify()
        return voice

    async def add_voice_from_bytes(
        self,
        avatar_id: str,
        name: str,
        data: bytes,
        duration: timedelta = timedelta(0),
        category: str = DEFAULT_CATEGORY,
        file_name: str | None = None,
        color: str | None = None,
    ) -> Voice:
        """Store audio bytes and append a voice referring to them.

        The blob is written first. If the metadata save then fails, the
        voice is dropped and the fresh blob deleted straight away.

        Raises:
            NotFoundError: If the avatar does not exist
            InvalidArgumentError: If the name is blank or duration negative
            BlobError: If the audio could not be stored (nothing changed)
            PersistenceError: If the save failed
        """
        name = _require_name(name, "Voice name")
        if duration < timedelta(0):
            raise InvalidArgumentError("Voice duration must not be negative")
        self._ensure_writable()
        self._index_of(avatar_id)

        key = f"{uuid4().hex}_{file_name}" if file_name else None
        ref = await self._put_blob(data, key, "audio")
        voice = Voice(
            name=name,
            audio_url=ref,
            duration=duration,
            category=category.strip() or DEFAULT_CATEGORY,
            color=color,
        )
        try:
            return await self.add_voice(avatar_id, voice)
        except (PersistenceError, NotFoundError, RepositoryStateError):
            await self.discard_blobs([ref], "unsaved upload")
            raise

    async def update_voice(
        self,
        avatar_id: str,
        voice_id: str,
        name: str | None = None,
        category: str | None = None,
        color: str | None = None,
        clear_color: bool = False,
    ) -> Voice:
        """Change voice fields. Fields left as None keep their value.

        Raises:
            NotFoundError: If the avatar or voice does not exist
            InvalidArgumentError: If the new name is blank
            PersistenceError: If the save failed; the voice is restored
        """
        if name is not None:
            name = _require_name(name, "Voice name")
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            voice = previous.find_voice(voice_id)
            if voice is None:
                raise NotFoundError("Voice", voice_id)
            updated = replace(
                voice,
                name=name if name is not None else voice.name,
                category=(category.strip() or DEFAULT_CATEGORY)
                if category is not None
                else voice.category,
                color=None if clear_color else color if color is not None else voice.color,
            )
            self._avatars[index] = previous.replace_voice(updated)
            await self._persist_or_restore(previous)

        self._notify()
        return updated

    async def update_voice_color(
        self, avatar_id: str, voice_id: str, color: str | None
    ) -> Voice:
        """Set a voice's colour override; None removes it."""
        return await self.update_voice(
            avatar_id, voice_id, color=color, clear_color=color is None
        )

    async def remove_voice(self, avatar_id: str, voice_id: str) -> Voice:
        """Remove a voice, then delete its audio in the background.

        A failed blob deletion does not bring the voice back.

        Raises:
            NotFoundError: If the avatar or voice does not exist
            PersistenceError: If the save failed; the voice is restored and
                its audio left untouched
        """
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            voice = previous.find_voice(voice_id)
            if voice is None:
                raise NotFoundError("Voice", voice_id)
            self._avatars[index] = previous.with_voices(
                [v for v in previous.voices if v.id != voice_id]
            )
            await self._persist_or_restore(previous)
            orphans = self._orphaned([voice.audio_url])

        self.cleaner.schedule(orphans, f"voice {voice_id} removed")
        self._notify()
        return voice

    async def remove_all_voices(self, avatar_id: str) -> list[Voice]:
        """Remove every voice of an avatar, then delete their audio.

        Raises:
            NotFoundError: If the avatar does not exist
            PersistenceError: If the save failed; the voices are restored
        """
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            removed = list(previous.voices)
            self._avatars[index] = previous.with_voices([])
            await self._persist_or_restore(previous)
            orphans = self._orphaned(voice.audio_url for voice in removed)

        logger.info("Removed %d voices from avatar %s", len(removed), avatar_id)
        self.cleaner.schedule(orphans, f"all voices of avatar {avatar_id} removed")
        self._notify()
        return removed

    async def reorder_voices(
        self, avatar_id: str, old_index: int, new_index: int
    ) -> Avatar:
        """Move the voice at ``old_index`` so it ends up at ``new_index``.

        ``new_index`` may equal the list length, meaning "after the last
        voice"; it is shifted down by one to account for the removal.

        Raises:
            NotFoundError: If the avatar does not exist
            IndexOutOfRangeError: If an index is out of range
            PersistenceError: If the save failed; the old order is restored
        """
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            length = len(previous.voices)
            if not 0 <= old_index < length:
                raise IndexOutOfRangeError("old_index", old_index, length)
            if not 0 <= new_index <= length:
                raise IndexOutOfRangeError("new_index", new_index, length)

            target = new_index - 1 if new_index == length else new_index
            voices = list(previous.voices)
            voices.insert(target, voices.pop(old_index))
            updated = previous.with_voices(voices)
            self._avatars[index] = updated
            await self._persist_or_restore(previous)

        self._notify()
        return updated

    async def track_usage(self, avatar_id: str, voice_id: str) -> Voice:
        """Record one play of a voice.

        Raises:
            NotFoundError: If the avatar or voice does not exist
            PersistenceError: If the save failed; the count is restored
        """
        return await self._update_usage(avatar_id, voice_id, Voice.increment_play_count)

    async def reset_usage(self, avatar_id: str, voice_id: str | None = None) -> Avatar:
        """Clear play statistics of one voice, or of every voice of the avatar."""
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            if voice_id is not None and previous.find_voice(voice_id) is None:
                raise NotFoundError("Voice", voice_id)
            updated = previous.with_voices(
                [
                    voice.reset_usage() if voice_id in (None, voice.id) else voice
                    for voice in previous.voices
                ]
            )
            self._avatars[index] = updated
            await self._persist_or_restore(previous)

        self._notify()
        return updated

    async def _update_usage(
        self, avatar_id: str, voice_id: str, change: Callable[[Voice], Voice]
    ) -> Voice:
        self._ensure_writable()

        async with self._write_lock:
            index = self._index_of(avatar_id)
            previous = self._avatars[index]
            voice = previous.find_voice(voice_id)
            if voice is None:
                raise NotFoundError("Voice", voice_id)
            updated = change(voice)
            self._avatars[index] = previous.replace_voice(updated)
            await self._persist_or_restore(previous)

        self._notify()
        return updated

    # --- Shutdown ---

    async def wait_for_cleanup(self) -> None:
        """Wait for background blob cleanup to finish."""
        await self.cleaner.wait()

    async def aclose(self) -> None:
        """Drain background work before the stores are torn down."""
        await self.cleaner.wait()
        self._observers.clear()

    # --- Internals ---

    async def _io(self, func, /, *args):
        return await run_blocking(func, *args, timeout=self.settings.storage_timeout)

    async def _put_blob(self, data: bytes, key: str | None, kind: str) -> str:
        try:
            return await self._io(self.blob_store.put, data, key, kind)
        except TimeoutError as e:
            raise BlobError(f"Timed out storing {kind} blob") from e
        except OSError as e:
            raise BlobError(f"Failed to store {kind} blob: {e}") from e

    async def _persist(self) -> None:
        """Save the current collection. The caller holds the write lock.

        Raises:
            PersistenceError: If the metadata store did not accept the save
        """
        document = encode_avatars(self._avatars)
        try:
            saved = await self._io(self.metadata_store.save, document)
        except TimeoutError as e:
            raise PersistenceError("Timed out saving avatar collection") from e
        if not saved:
            raise PersistenceError("Failed to save avatar collection")

    async def _persist_or_restore(self, previous: Avatar) -> None:
        try:
            await self._persist()
        except PersistenceError:
            self._restore(previous)
            logger.warning("Restored avatar %s after failed save", previous.id)
            raise

    def _restore(self, previous: Avatar) -> None:
        index = self._find_index(previous.id)
        if index >= 0:
            self._avatars[index] = previous

    def _discard(self, avatar_id: str) -> None:
        index = self._find_index(avatar_id)
        if index >= 0:
            del self._avatars[index]

    def _find_index(self, avatar_id: str) -> int:
        for index, avatar in enumerate(self._avatars):
            if avatar.id == avatar_id:
                return index
        return -1

    def _index_of(self, avatar_id: str) -> int:
        index = self._find_index(avatar_id)
        if index < 0:
            raise NotFoundError("Avatar", avatar_id)
        return index

    def _referenced(self) -> set[str]:
        return {ref for avatar in self._avatars for ref in avatar.blob_refs()}

    def _orphaned(self, refs: Iterable[str | None]) -> list[str]:
        """References no longer used by any avatar in the collection."""
        referenced = self._referenced()
        return [ref for ref in dict.fromkeys(refs) if ref and ref not in referenced]

    def _begin_deletion(self) -> None:
        if self._deleting:
            raise DeletionInProgressError("Another deletion is already in progress")
        self._deleting = True

    def _ensure_writable(self) -> None:
        if self.state in (RepositoryState.IDLE, RepositoryState.LOADING):
            raise RepositoryStateError("Collection has not been loaded yet")
        if self.state is RepositoryState.ERROR and not isinstance(
            self.load_error, DecodeError
        ):
            raise RepositoryStateError(
                "Stored collection could not be read; reload before making changes"
            )
