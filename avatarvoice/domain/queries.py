"""Read-only queries over an in-memory avatar collection."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import timedelta

from avatarvoice.domain.models import Avatar, Voice


@dataclass(frozen=True)
class VoiceMatch:
    """A voice together with the avatar that owns it."""

    avatar: Avatar
    voice: Voice


@dataclass
class SearchResult:
    """Avatars whose name matched, and voices whose name or category matched."""

    avatars: list[Avatar] = field(default_factory=list)
    voices: list[VoiceMatch] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.avatars and not self.voices


@dataclass(frozen=True)
class CollectionStats:
    """Aggregate figures for the whole collection."""

    avatar_count: int
    voice_count: int
    total_plays: int
    total_duration: timedelta


def iter_voices(avatars: Iterable[Avatar]) -> Iterator[VoiceMatch]:
    """Yield every voice in collection order (avatar order, then voice order)."""
    for avatar in avatars:
        for voice in avatar.voices:
            yield VoiceMatch(avatar=avatar, voice=voice)


def search(avatars: Iterable[Avatar], query: str) -> SearchResult:
    """Case-insensitive substring search.

    Avatars match on name; voices match on name or category.
    A blank query matches nothing.
    """
    result = SearchResult()
    needle = query.strip().casefold()
    if not needle:
        return result

    for avatar in avatars:
        if needle in avatar.name.casefold():
            result.avatars.append(avatar)
        for voice in avatar.voices:
            if needle in voice.name.casefold() or needle in voice.category.casefold():
                result.voices.append(VoiceMatch(avatar=avatar, voice=voice))
    return result


def _limited(matches: list[VoiceMatch], limit: int | None) -> list[VoiceMatch]:
    if limit is None:
        return matches
    if limit <= 0:
        return []
    return matches[:limit]


def most_used(avatars: Iterable[Avatar], limit: int | None = 10) -> list[VoiceMatch]:
    """Voices with at least one play, highest play count first.

    ``sorted`` is stable, so ties keep collection order.
    """
    played = [match for match in iter_voices(avatars) if match.voice.play_count > 0]
    played.sort(key=lambda match: match.voice.play_count, reverse=True)
    return _limited(played, limit)


def recently_used(
    avatars: Iterable[Avatar], limit: int | None = 10
) -> list[VoiceMatch]:
    """Voices that have been played, most recent first."""
    played = [
        match for match in iter_voices(avatars) if match.voice.last_played is not None
    ]
    played.sort(key=lambda match: match.voice.last_played, reverse=True)  # type: ignore
    return _limited(played, limit)


def category_counts(avatars: Iterable[Avatar]) -> dict[str, int]:
    """Number of voices per category, in first-seen order."""
    counts: dict[str, int] = {}
    for match in iter_voices(avatars):
        counts[match.voice.category] = counts.get(match.voice.category, 0) + 1
    return counts


def collection_stats(avatars: Iterable[Avatar]) -> CollectionStats:
    """Totals across the collection."""
    avatar_count = 0
    voice_count = 0
    total_plays = 0
    total_duration = timedelta(0)
    for avatar in avatars:
        avatar_count += 1
        for voice in avatar.voices:
            voice_count += 1
            total_plays += voice.play_count
            total_duration += voice.duration
    return CollectionStats(
        avatar_count=avatar_count,
        voice_count=voice_count,
        total_plays=total_plays,
        total_duration=total_duration,
    )
