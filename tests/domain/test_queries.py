from datetime import UTC, datetime, timedelta

import pytest

from avatarvoice.domain.models import Avatar, Voice
from avatarvoice.domain.queries import (
    category_counts,
    collection_stats,
    iter_voices,
    most_used,
    recently_used,
    search,
)


def _voice(name: str, plays: int = 0, category: str = "Speech", **kwargs) -> Voice:
    return Voice(
        name=name, audio_url=f"/{name}.wav", play_count=plays, category=category, **kwargs
    )


@pytest.fixture
def robot() -> Avatar:
    return Avatar(
        name="Robot",
        voices=(
            _voice("Laugh", category="SFX"),
            _voice("Hello"),
        ),
    )


class TestSearch:
    def test_matches_voice_name_and_category(self, robot: Avatar):
        laugh = robot.voices[0]

        by_name = search([robot], "lau")
        by_category = search([robot], "sfx")

        assert [m.voice for m in by_name.voices] == [laugh]
        assert [m.voice for m in by_category.voices] == [laugh]
        assert by_name.voices[0].avatar is robot

    def test_matches_avatar_name(self, robot: Avatar):
        result = search([robot], "ROB")

        assert result.avatars == [robot]
        assert result.voices == []

    def test_no_match(self, robot: Avatar):
        assert search([robot], "zzz").is_empty

    def test_blank_query(self, robot: Avatar):
        assert search([robot], "   ").is_empty


class TestRankings:
    def test_most_used_excludes_unplayed(self):
        five, zero, three = _voice("five", 5), _voice("zero", 0), _voice("three", 3)
        avatars = [Avatar(name="A", voices=(five, zero, three))]

        ranked = most_used(avatars, 2)

        assert [m.voice for m in ranked] == [five, three]

    def test_most_used_ties_keep_collection_order(self):
        first = _voice("first", 2)
        second = _voice("second", 2)
        avatars = [
            Avatar(name="A", voices=(first,)),
            Avatar(name="B", voices=(second,)),
        ]

        assert [m.voice for m in most_used(avatars)] == [first, second]

    def test_recently_used(self):
        base = datetime(2024, 1, 1, tzinfo=UTC)
        old = _voice("old", 1, last_played=base)
        new = _voice("new", 1, last_played=base + timedelta(days=1))
        never = _voice("never")
        avatars = [Avatar(name="A", voices=(old, never, new))]

        assert [m.voice for m in recently_used(avatars)] == [new, old]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, limit):
        avatars = [Avatar(name="A", voices=(_voice("v", 1),))]
        assert most_used(avatars, limit) == []

    def test_unbounded_limit(self):
        avatars = [Avatar(name="A", voices=tuple(_voice(str(i), 1) for i in range(15)))]
        assert len(most_used(avatars, None)) == 15
        assert len(most_used(avatars)) == 10


class TestStats:
    def test_collection_stats(self, robot: Avatar):
        timed = Avatar(
            name="Cat",
            voices=(_voice("Meow", 3, duration=timedelta(seconds=2)),),
        )

        stats = collection_stats([robot, timed])

        assert stats.avatar_count == 2
        assert stats.voice_count == 3
        assert stats.total_plays == 3
        assert stats.total_duration == timedelta(seconds=2)

    def test_category_counts(self, robot: Avatar):
        assert category_counts([robot]) == {"SFX": 1, "Speech": 1}

    def test_iter_voices_order(self, robot: Avatar):
        assert [m.voice.name for m in iter_voices([robot])] == ["Laugh", "Hello"]
