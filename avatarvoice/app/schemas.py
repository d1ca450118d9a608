"""Request and response models for the HTTP API."""

import base64
import binascii
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from avatarvoice.domain.exceptions import InvalidArgumentError
from avatarvoice.domain.models import DEFAULT_CATEGORY, Avatar, AvatarIcon, Voice
from avatarvoice.domain.queries import CollectionStats, SearchResult, VoiceMatch


def decode_payload(value: str) -> bytes:
    """Decode base64 or data-URL (``data:<mime>;base64,<data>``) content.

    Raises:
        InvalidArgumentError: If the content is not valid base64
    """
    if value.startswith("data:"):
        _, _, value = value.partition(",")
    try:
        data = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidArgumentError(f"Invalid base64 payload: {e}") from e
    if not data:
        raise InvalidArgumentError("Payload must not be empty")
    return data


class AvatarCreateRequest(BaseModel):
    """Avatar creation request."""

    name: str = Field(..., min_length=1, max_length=100)
    icon: AvatarIcon | None = None
    color: str | None = None
    image_data: str | None = Field(
        default=None, description="Image (base64 or data URL)"
    )
    image_file_name: str | None = Field(default=None, max_length=200)


class AvatarUpdateRequest(BaseModel):
    """Avatar update request. Omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    icon: AvatarIcon | None = None
    color: str | None = None
    image_data: str | None = Field(
        default=None, description="New image (base64 or data URL)"
    )
    image_file_name: str | None = Field(default=None, max_length=200)
    clear_image: bool = False


class VoiceCreateRequest(BaseModel):
    """Voice upload request."""

    name: str = Field(..., min_length=1, max_length=100)
    audio_data: str = Field(
        ..., min_length=1, description="Audio (base64 or data URL)"
    )
    duration_ms: int = Field(default=0, ge=0)
    category: str = Field(default=DEFAULT_CATEGORY, max_length=100)
    file_name: str | None = Field(default=None, max_length=200)
    color: str | None = None


class VoiceUpdateRequest(BaseModel):
    """Voice update request. Omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, max_length=100)
    color: str | None = None
    clear_color: bool = False


class ReorderRequest(BaseModel):
    """Move a voice from one position to another."""

    old_index: int
    new_index: int


class VoiceResponse(BaseModel):
    id: str
    name: str
    audio_url: str
    duration_ms: int
    created_at: datetime
    category: str
    play_count: int
    last_played: datetime | None
    color: str | None

    @classmethod
    def from_voice(cls, voice: Voice) -> "VoiceResponse":
        return cls(
            id=voice.id,
            name=voice.name,
            audio_url=voice.audio_url,
            duration_ms=voice.duration // timedelta(milliseconds=1),
            created_at=voice.created_at,
            category=voice.category,
            play_count=voice.play_count,
            last_played=voice.last_played,
            color=voice.color,
        )


class AvatarResponse(BaseModel):
    id: str
    name: str
    color: str
    icon: AvatarIcon
    image_path: str | None
    voices: list[VoiceResponse]

    @classmethod
    def from_avatar(cls, avatar: Avatar) -> "AvatarResponse":
        return cls(
            id=avatar.id,
            name=avatar.name,
            color=avatar.color,
            icon=avatar.icon,
            image_path=avatar.image_path,
            voices=[VoiceResponse.from_voice(voice) for voice in avatar.voices],
        )


class VoiceMatchResponse(BaseModel):
    avatar_id: str
    avatar_name: str
    voice: VoiceResponse

    @classmethod
    def from_match(cls, match: VoiceMatch) -> "VoiceMatchResponse":
        return cls(
            avatar_id=match.avatar.id,
            avatar_name=match.avatar.name,
            voice=VoiceResponse.from_voice(match.voice),
        )


class SearchResponse(BaseModel):
    avatars: list[AvatarResponse]
    voices: list[VoiceMatchResponse]

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        return cls(
            avatars=[AvatarResponse.from_avatar(avatar) for avatar in result.avatars],
            voices=[VoiceMatchResponse.from_match(match) for match in result.voices],
        )


class StatsResponse(BaseModel):
    avatar_count: int
    voice_count: int
    total_plays: int
    total_duration_ms: int
    categories: dict[str, int]

    @classmethod
    def from_stats(
        cls, stats: CollectionStats, categories: dict[str, int]
    ) -> "StatsResponse":
        return cls(
            avatar_count=stats.avatar_count,
            voice_count=stats.voice_count,
            total_plays=stats.total_plays,
            total_duration_ms=stats.total_duration // timedelta(milliseconds=1),
            categories=categories,
        )


class DeleteAllResponse(BaseModel):
    removed: int


class HealthResponse(BaseModel):
    status: str
    state: str
    avatar_count: int
    is_deleting: bool
    pending_cleanups: int
    last_sync: datetime | None
    load_error: str | None = None
