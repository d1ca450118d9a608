import json
from datetime import UTC, datetime, timedelta

import pytest

from avatarvoice.domain.codec import (
    UNNAMED_AVATAR,
    UNNAMED_VOICE,
    decode_avatars,
    decode_icon,
    encode_avatars,
    encode_icon,
)
from avatarvoice.domain.exceptions import DecodeError
from avatarvoice.domain.models import AVATAR_COLORS, Avatar, AvatarIcon, Voice


@pytest.fixture
def collection() -> list[Avatar]:
    laugh = Voice(
        name="Laugh",
        audio_url="/data/audio_files/laugh.wav",
        duration=timedelta(milliseconds=1534),
        created_at=datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC),
        category="SFX",
        play_count=4,
        last_played=datetime(2024, 2, 1, 12, 0, tzinfo=UTC),
        color="teal",
    )
    hello = Voice(name="Hello", audio_url="assetdb://audio_1")
    return [
        Avatar(
            name="Robot",
            color="blue",
            icon=AvatarIcon.SMART_TOY,
            image_path="/data/avatar_images/robot.png",
            voices=(laugh, hello),
        ),
        Avatar(name="Empty", color="red"),
    ]


class TestRoundTrip:
    def test_decode_encode_preserves_everything(self, collection: list[Avatar]):
        document = encode_avatars(collection)

        result = decode_avatars(document)

        assert result.skipped == 0
        assert result.avatars == collection
        assert encode_avatars(result.avatars) == document

    def test_wire_format(self, collection: list[Avatar]):
        data = json.loads(encode_avatars(collection))
        robot = data[0]
        laugh = robot["voices"][0]

        assert set(robot) == {"id", "name", "color", "icon", "voices", "imagePath"}
        assert robot["icon"] == "smart_toy"
        assert laugh["audioUrl"] == "/data/audio_files/laugh.wav"
        assert laugh["duration"] == 1534
        assert laugh["playCount"] == 4
        assert laugh["createdAt"] == "2024-01-02T03:04:05.678000+00:00"
        assert data[1]["imagePath"] is None


class TestDecodeDegradation:
    def test_empty_document(self):
        assert decode_avatars(None).avatars == []
        assert decode_avatars("").avatars == []
        assert decode_avatars("[]").avatars == []

    def test_invalid_json_raises(self):
        with pytest.raises(DecodeError):
            decode_avatars("{not json")

    def test_non_array_raises(self):
        with pytest.raises(DecodeError):
            decode_avatars('{"avatars": []}')

    def test_bad_records_are_skipped(self):
        document = json.dumps(
            [
                "garbage",
                {"id": "a1", "name": "Robot", "voices": [{"id": "v1", "name": "x"}]},
                {"id": "a2", "name": "Cat"},
            ]
        )

        result = decode_avatars(document)

        assert [a.id for a in result.avatars] == ["a1", "a2"]
        assert result.avatars[0].voices == ()
        assert result.skipped == 2

    def test_field_defaults(self):
        document = json.dumps(
            [
                {
                    "color": "not-a-colour",
                    "icon": "57415:MaterialIcons:",
                    "voices": [
                        {
                            "audioUrl": "/a.wav",
                            "duration": -5,
                            "playCount": "many",
                            "createdAt": "yesterday",
                            "lastPlayed": "soon",
                        }
                    ],
                }
            ]
        )

        avatar = decode_avatars(document).avatars[0]
        voice = avatar.voices[0]

        assert avatar.id
        assert avatar.name == UNNAMED_AVATAR
        assert avatar.color in AVATAR_COLORS
        assert avatar.icon is AvatarIcon.PERSON
        assert voice.id
        assert voice.name == UNNAMED_VOICE
        assert voice.duration == timedelta(0)
        assert voice.play_count == 0
        assert voice.last_played is None
        assert voice.created_at.tzinfo is not None

    def test_naive_timestamps_are_utc(self):
        document = json.dumps(
            [
                {
                    "id": "a",
                    "name": "Robot",
                    "voices": [
                        {"audioUrl": "/a.wav", "createdAt": "2023-06-01T10:00:00"}
                    ],
                }
            ]
        )

        voice = decode_avatars(document).avatars[0].voices[0]

        assert voice.created_at == datetime(2023, 6, 1, 10, 0, tzinfo=UTC)


class TestIcon:
    def test_encode(self):
        assert encode_icon(AvatarIcon.MIC) == "mic"
        assert encode_icon(None) == ""

    @pytest.mark.parametrize("value", ["", None, "unknown", "57415:MaterialIcons:"])
    def test_unknown_falls_back_to_default(self, value):
        assert decode_icon(value) is AvatarIcon.default()

    def test_every_icon_round_trips(self):
        for icon in AvatarIcon:
            assert decode_icon(encode_icon(icon)) is icon
