"""Value objects for the messaging domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from works_gateway.shared.exceptions import ValidationError


class MessageType(str, Enum):
    """Message content types accepted by the Bot API."""
    TEXT = "text"
    STICKER = "sticker"
    IMAGE = "image"
    FILE = "file"
    LINK = "link"
    BUTTON_TEMPLATE = "button_template"
    LIST_TEMPLATE = "list_template"
    CAROUSEL = "carousel"
    IMAGE_CAROUSEL = "image_carousel"
    FLEX = "flex"


class TargetKind(str, Enum):
    USER = "user"
    CHANNEL = "channel"


@dataclass(frozen=True)
class Target:
    """Message recipient: a user or a channel (talk room)."""

    kind: TargetKind
    id: str

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Target id cannot be empty.", details={"field": f"{self.kind.value}Id"})

    @classmethod
    def user(cls, user_id: str) -> "Target":
        return cls(TargetKind.USER, user_id)

    @classmethod
    def channel(cls, channel_id: str) -> "Target":
        return cls(TargetKind.CHANNEL, channel_id)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "Target":
        """userId takes precedence when both userId and channelId are set."""
        user_id = params.get("userId")
        channel_id = params.get("channelId")
        if user_id:
            return cls.user(str(user_id))
        if channel_id:
            return cls.channel(str(channel_id))
        raise ValidationError(
            "No destination was specified (userId or channelId).",
            details={"fields": ["userId", "channelId"]},
        )

    def as_params(self) -> dict:
        key = "userId" if self.kind is TargetKind.USER else "channelId"
        return {key: self.id}

    @property
    def path(self) -> str:
        if self.kind is TargetKind.USER:
            return f"users/{self.id}/messages"
        return f"channels/{self.id}/messages"
