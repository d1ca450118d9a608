"""Filesystem blob store."""

import logging
import re
import shutil
from pathlib import Path
from uuid import uuid4

from avatarvoice.domain.exceptions import BlobError
from avatarvoice.domain.protocols import BlobKind

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_file_name(name: str) -> str:
    """Reduce a caller supplied name to a safe bare file name."""
    name = name.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name


class LocalStorage:
    """Blob store on the local filesystem.

    Audio and images live in separate subdirectories under ``base_path``,
    created on first write. References are absolute file paths.
    """

    def __init__(
        self,
        base_path: str = "./data",
        audio_dir_name: str = "audio_files",
        image_dir_name: str = "avatar_images",
    ) -> None:
        self.base_path = Path(base_path).resolve()
        self.dirs: dict[str, Path] = {
            "audio": self.base_path / audio_dir_name,
            "image": self.base_path / image_dir_name,
        }

    def _directory(self, kind: BlobKind) -> Path:
        directory = self.dirs[kind]
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def _owns(self, path: Path) -> bool:
        return any(path.is_relative_to(directory) for directory in self.dirs.values())

    def owns(self, ref: str) -> bool:
        """Whether ``ref`` is a path inside this store's directories."""
        return bool(ref) and self._owns(Path(ref).resolve())

    def put(self, data: bytes, key: str | None = None, kind: BlobKind = "audio") -> str:
        """Write bytes to a file.

        Args:
            data: Raw bytes
            key: File name, reduced to a bare safe name; an existing file of
                that name is overwritten. Generated when omitted.
            kind: "audio" or "image"

        Returns:
            Absolute path of the written file

        Raises:
            BlobError: If the file could not be written
        """
        file_name = sanitize_file_name(key) if key else ""
        if not file_name:
            file_name = f"{kind}_{uuid4().hex}"
        try:
            file_path = self._directory(kind) / file_name
            with open(file_path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.exception("Error saving %s blob %s", kind, file_name)
            raise BlobError(f"Failed to save {kind} blob {file_name}: {e}") from e

        logger.debug("Saved %s blob to %s", kind, file_path)
        return str(file_path)

    def get(self, ref: str) -> bytes | None:
        """Read a file back, or None when missing or unreadable."""
        path = Path(ref).resolve()
        if not self._owns(path) or not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError:
            logger.exception("Failed to read blob %s", ref)
            return None

    def delete(self, ref: str) -> bool:
        """Delete a file. A missing file counts as deleted.

        Returns:
            False when the file could not be removed or lies outside this store
        """
        if not ref:
            logger.warning("Cannot delete blob: empty reference")
            return False
        path = Path(ref).resolve()
        if not self._owns(path):
            logger.warning("Refusing to delete %s: outside %s", ref, self.base_path)
            return False
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete blob %s", ref)
            return False
        logger.debug("Deleted blob %s", ref)
        return True

    def clear(self) -> None:
        """Remove both blob directories."""
        for directory in self.dirs.values():
            if directory.exists():
                shutil.rmtree(directory)
        logger.info("Cleared filesystem blob store at %s", self.base_path)
