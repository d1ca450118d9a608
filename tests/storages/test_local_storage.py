from pathlib import Path

import pytest

from avatarvoice.domain.exceptions import BlobError
from avatarvoice.storages.local_storage import LocalStorage, sanitize_file_name


class TestSanitizeFileName:
    def test_strips_directories(self):
        assert sanitize_file_name("../../etc/passwd") == "passwd"
        assert sanitize_file_name("C:\\Users\\me\\clip.wav") == "clip.wav"

    def test_replaces_unsafe_characters(self):
        assert sanitize_file_name("my clip (1).wav") == "my_clip__1_.wav"

    def test_strips_leading_dots(self):
        assert sanitize_file_name(".hidden") == "hidden"


class TestLocalStorage:
    """Tests for the filesystem blob store."""

    def test_put_generates_key_in_audio_dir(self, local_storage: LocalStorage):
        ref = local_storage.put(b"audio bytes")

        path = Path(ref)
        assert path.is_absolute()
        assert path.parent == local_storage.dirs["audio"]
        assert path.name.startswith("audio_")
        assert path.read_bytes() == b"audio bytes"

    def test_put_image_goes_to_image_dir(self, local_storage: LocalStorage):
        ref = local_storage.put(b"png", key="face.png", kind="image")

        assert Path(ref) == local_storage.dirs["image"] / "face.png"

    def test_generated_keys_do_not_collide(self, local_storage: LocalStorage):
        refs = {local_storage.put(b"x") for _ in range(20)}
        assert len(refs) == 20

    def test_put_with_key_overwrites(self, local_storage: LocalStorage):
        first = local_storage.put(b"one", key="clip.wav")
        second = local_storage.put(b"two", key="clip.wav")

        assert first == second
        assert local_storage.get(first) == b"two"

    def test_put_cannot_escape_store(self, local_storage: LocalStorage, tmp_path: Path):
        ref = local_storage.put(b"x", key="../../outside.wav")

        assert Path(ref).parent == local_storage.dirs["audio"]
        assert not (tmp_path / "outside.wav").exists()

    def test_directories_created_lazily(self, local_storage: LocalStorage):
        assert not local_storage.dirs["audio"].exists()
        local_storage.put(b"x")
        assert local_storage.dirs["audio"].exists()
        assert not local_storage.dirs["image"].exists()

    def test_put_failure_raises_blob_error(self, tmp_path: Path):
        blocker = tmp_path / "blocked"
        blocker.write_bytes(b"not a directory")
        storage = LocalStorage(base_path=str(blocker))

        with pytest.raises(BlobError):
            storage.put(b"x")

    def test_get_missing_returns_none(self, local_storage: LocalStorage):
        missing = local_storage.dirs["audio"] / "missing.wav"
        assert local_storage.get(str(missing)) is None

    def test_get_outside_store_returns_none(
        self, local_storage: LocalStorage, tmp_path: Path
    ):
        foreign = tmp_path / "foreign.wav"
        foreign.write_bytes(b"secret")

        assert local_storage.get(str(foreign)) is None

    def test_delete_is_idempotent(self, local_storage: LocalStorage):
        ref = local_storage.put(b"x")

        assert local_storage.delete(ref) is True
        assert not Path(ref).exists()
        assert local_storage.delete(ref) is True

    def test_delete_refuses_foreign_files(
        self, local_storage: LocalStorage, tmp_path: Path
    ):
        foreign = tmp_path / "foreign.wav"
        foreign.write_bytes(b"keep me")

        assert local_storage.delete(str(foreign)) is False
        assert foreign.exists()

    def test_owns(self, local_storage: LocalStorage, tmp_path: Path):
        ref = local_storage.put(b"x", kind="image")

        assert local_storage.owns(ref) is True
        assert local_storage.owns(str(tmp_path / "foreign.wav")) is False
        assert local_storage.owns("") is False

    def test_delete_empty_reference(self, local_storage: LocalStorage):
        assert local_storage.delete("") is False

    def test_clear_removes_everything(self, local_storage: LocalStorage):
        audio = local_storage.put(b"a")
        image = local_storage.put(b"i", kind="image")

        local_storage.clear()

        assert not Path(audio).exists()
        assert not Path(image).exists()
        # Still usable afterwards
        assert local_storage.get(local_storage.put(b"again")) == b"again"
