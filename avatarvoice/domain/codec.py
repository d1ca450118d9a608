"""JSON codec for the avatar collection document.

The stored document is a JSON array of avatar objects. Decoding is tolerant:
missing or malformed fields fall back to defaults, and a record that cannot
be decoded at all is skipped so one bad entry never fails the whole load.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from ulid import ULID

from avatarvoice.domain.exceptions import DecodeError
from avatarvoice.domain.models import (
    AVATAR_COLORS,
    DEFAULT_CATEGORY,
    Avatar,
    AvatarIcon,
    Voice,
    random_color,
)

logger = logging.getLogger(__name__)

UNNAMED_AVATAR = "Unnamed Avatar"
UNNAMED_VOICE = "Unnamed Voice"


@dataclass
class DecodeResult:
    """Outcome of decoding a collection document."""

    avatars: list[Avatar] = field(default_factory=list)
    skipped: int = 0


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def encode_icon(icon: AvatarIcon | None) -> str:
    """Encode an icon as its symbolic name ("" for unset)."""
    return icon.value if icon is not None else ""


def decode_icon(value: Any) -> AvatarIcon:
    """Decode a stored icon name, falling back to the default icon."""
    if not isinstance(value, str) or not value:
        return AvatarIcon.default()
    try:
        return AvatarIcon(value)
    except ValueError:
        logger.debug("Unknown icon %r, using default", value)
        return AvatarIcon.default()


def voice_to_dict(voice: Voice) -> dict[str, Any]:
    """Convert a voice to a JSON-compatible dict."""
    return {
        "id": voice.id,
        "name": voice.name,
        "audioUrl": voice.audio_url,
        "duration": voice.duration // timedelta(milliseconds=1),
        "createdAt": _format_datetime(voice.created_at),
        "category": voice.category,
        "playCount": voice.play_count,
        "lastPlayed": (
            _format_datetime(voice.last_played) if voice.last_played else None
        ),
        "color": voice.color,
    }


def voice_from_dict(data: dict[str, Any]) -> Voice:
    """Build a voice from a decoded JSON object.

    Raises:
        ValueError: If the record has no audio reference
    """
    audio_url = _non_empty_str(data.get("audioUrl"))
    if audio_url is None:
        raise ValueError("voice record has no audioUrl")

    color = data.get("color")
    return Voice(
        id=_non_empty_str(data.get("id")) or str(ULID()),
        name=_non_empty_str(data.get("name")) or UNNAMED_VOICE,
        audio_url=audio_url,
        duration=timedelta(milliseconds=_non_negative_int(data.get("duration"))),
        created_at=_parse_datetime(data.get("createdAt")) or datetime.now(UTC),
        category=_non_empty_str(data.get("category")) or DEFAULT_CATEGORY,
        play_count=_non_negative_int(data.get("playCount")),
        last_played=_parse_datetime(data.get("lastPlayed")),
        color=color if isinstance(color, str) and color else None,
    )


def avatar_to_dict(avatar: Avatar) -> dict[str, Any]:
    """Convert an avatar (and its voices) to a JSON-compatible dict."""
    return {
        "id": avatar.id,
        "name": avatar.name,
        "color": avatar.color,
        "icon": encode_icon(avatar.icon),
        "voices": [voice_to_dict(voice) for voice in avatar.voices],
        "imagePath": avatar.image_path,
    }


def avatar_from_dict(data: dict[str, Any]) -> tuple[Avatar, int]:
    """Build an avatar from a decoded JSON object.

    Returns:
        The avatar and the number of voice records that had to be skipped
    """
    voices: list[Voice] = []
    skipped = 0
    raw_voices = data.get("voices")
    if isinstance(raw_voices, list):
        for item in raw_voices:
            if not isinstance(item, dict):
                skipped += 1
                continue
            try:
                voices.append(voice_from_dict(item))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping voice %r: %s", item.get("id"), e)
                skipped += 1

    color = data.get("color")
    image_path = data.get("imagePath")
    avatar = Avatar(
        id=_non_empty_str(data.get("id")) or str(ULID()),
        name=_non_empty_str(data.get("name")) or UNNAMED_AVATAR,
        color=color if color in AVATAR_COLORS else random_color(),
        icon=decode_icon(data.get("icon")),
        image_path=image_path if isinstance(image_path, str) and image_path else None,
        voices=tuple(voices),
    )
    return avatar, skipped


def encode_avatars(avatars: list[Avatar] | tuple[Avatar, ...]) -> str:
    """Serialize the collection to the stored JSON document."""
    return json.dumps([avatar_to_dict(avatar) for avatar in avatars])


def decode_avatars(document: str | None) -> DecodeResult:
    """Parse a stored JSON document into avatars.

    Args:
        document: The stored document; None or "" means no record

    Returns:
        DecodeResult with the avatars and a count of skipped records

    Raises:
        DecodeError: If the document is not a JSON array
    """
    result = DecodeResult()
    if not document:
        return result

    try:
        items = json.loads(document)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Collection document is not valid JSON: {e}") from e
    if not isinstance(items, list):
        raise DecodeError(
            f"Collection document must be a JSON array, got {type(items).__name__}"
        )

    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object avatar record: %r", item)
            result.skipped += 1
            continue
        try:
            avatar, skipped_voices = avatar_from_dict(item)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping avatar %r: %s", item.get("id"), e)
            result.skipped += 1
            continue
        result.avatars.append(avatar)
        result.skipped += skipped_voices

    return result
