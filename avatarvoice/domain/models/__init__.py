"""Domain models."""

from avatarvoice.domain.models.avatar import (
    AVATAR_COLORS,
    Avatar,
    AvatarIcon,
    random_color,
)
from avatarvoice.domain.models.voice import DEFAULT_CATEGORY, Voice

__all__ = [
    "AVATAR_COLORS",
    "Avatar",
    "AvatarIcon",
    "DEFAULT_CATEGORY",
    "Voice",
    "random_color",
]
