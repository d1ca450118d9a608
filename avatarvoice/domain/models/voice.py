"""Voice domain model."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from ulid import ULID

DEFAULT_CATEGORY = "Uncategorized"


def _generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class Voice:
    """One audio recording belonging to exactly one avatar."""

    name: str
    audio_url: str  # blob store reference (file path or assetdb:// key)
    id: str = field(default_factory=_generate_ulid)
    duration: timedelta = timedelta(0)
    created_at: datetime = field(default_factory=_utc_now)
    category: str = DEFAULT_CATEGORY
    play_count: int = 0
    last_played: datetime | None = None
    color: str | None = None

    def increment_play_count(self, now: datetime | None = None) -> "Voice":
        """Copy with one more play recorded at ``now``."""
        return replace(
            self,
            play_count=self.play_count + 1,
            last_played=now or _utc_now(),
        )

    def reset_usage(self) -> "Voice":
        """Copy with play statistics cleared."""
        return replace(self, play_count=0, last_played=None)
