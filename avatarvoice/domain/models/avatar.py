"""Avatar domain model."""

import random
from dataclasses import dataclass, field, replace
from enum import Enum

from ulid import ULID

from avatarvoice.domain.models.voice import Voice

# Named colours understood by the presentation layer.
AVATAR_COLORS: tuple[str, ...] = (
    "green",
    "light_green",
    "forest_green",
    "orange",
    "amber",
    "warm_orange",
    "sand",
    "blue",
    "teal",
    "cyan",
    "sky_blue",
    "light_blue",
    "red",
    "pink",
    "coral",
    "rose",
    "purple",
    "indigo",
    "deep_purple",
)


class AvatarIcon(str, Enum):
    """Symbolic icon identifiers.

    The values are what gets persisted; the UI maps them to its own glyphs.
    """

    PERSON = "person"
    FACE = "face"
    ACCOUNT_CIRCLE = "account_circle"
    EMOJI_EMOTIONS = "emoji_emotions"
    PSYCHOLOGY = "psychology"
    SMART_TOY = "smart_toy"
    ANDROID = "android"
    PETS = "pets"
    STAR = "star"
    FAVORITE = "favorite"
    MUSIC_NOTE = "music_note"
    MIC = "mic"
    RECORD_VOICE_OVER = "record_voice_over"
    CAMPAIGN = "campaign"
    VOLUME_UP = "volume_up"

    @classmethod
    def default(cls) -> "AvatarIcon":
        """Icon used when none was chosen."""
        return cls.PERSON


def _generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def random_color() -> str:
    """Pick a colour from the palette."""
    return random.choice(AVATAR_COLORS)


@dataclass(frozen=True)
class Avatar:
    """A named persona owning an ordered list of voices.

    Instances are immutable; mutations produce a new instance via
    ``dataclasses.replace`` so readers never observe a half-applied change.
    """

    name: str
    id: str = field(default_factory=_generate_ulid)
    color: str = field(default_factory=random_color)
    icon: AvatarIcon = AvatarIcon.PERSON
    image_path: str | None = None
    voices: tuple[Voice, ...] = ()

    def find_voice(self, voice_id: str) -> Voice | None:
        """Return the voice with the given id, if owned by this avatar."""
        for voice in self.voices:
            if voice.id == voice_id:
                return voice
        return None

    def voice_index(self, voice_id: str) -> int:
        """Return the position of a voice, or -1 when absent."""
        for index, voice in enumerate(self.voices):
            if voice.id == voice_id:
                return index
        return -1

    def with_voices(self, voices: list[Voice] | tuple[Voice, ...]) -> "Avatar":
        """Copy with a new voice sequence."""
        return replace(self, voices=tuple(voices))

    def replace_voice(self, voice: Voice) -> "Avatar":
        """Copy with the voice of the same id swapped for ``voice``."""
        return self.with_voices(
            [voice if existing.id == voice.id else existing for existing in self.voices]
        )

    def blob_refs(self) -> list[str]:
        """All blob references owned by this avatar (audio, then image)."""
        refs = [voice.audio_url for voice in self.voices if voice.audio_url]
        if self.image_path:
            refs.append(self.image_path)
        return refs
