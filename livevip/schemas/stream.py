"""Stream catalog records.

Upstream records may omit optional fields or send them as null; everything is
normalized here so the viewing session only ever sees fully populated records.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORY = "Entertainment"
DEFAULT_STREAMER_AVATAR = (
    "https://images.unsplash.com/photo-1535713875002-d1d0cf377fde?w=100&h=100&fit=crop&crop=face"
)


class StreamRecord(BaseModel):
    """Immutable snapshot of one catalog entry."""

    id: str = Field(..., description="Stream identity")
    title: str = Field(..., description="Stream title")
    thumbnail: str = Field(default="", description="Poster / thumbnail URL")
    video_url: str = Field(
        default="",
        alias="videoUrl",
        validation_alias=AliasChoices("videoUrl", "video_url"),
        description="Media URL, empty when the stream has no playable media",
    )
    streamer_name: str = Field(
        default="",
        alias="streamerName",
        validation_alias=AliasChoices("streamerName", "streamer_name"),
    )
    streamer_avatar: str = Field(
        default=DEFAULT_STREAMER_AVATAR,
        alias="streamerAvatar",
        validation_alias=AliasChoices("streamerAvatar", "streamer_avatar"),
    )
    category: str = DEFAULT_CATEGORY
    viewer_count: int = Field(
        default=0,
        alias="viewerCount",
        validation_alias=AliasChoices("viewerCount", "viewer_count"),
    )
    is_vip_only: bool = Field(
        default=False,
        alias="isVipOnly",
        validation_alias=AliasChoices("isVipOnly", "is_vip_only"),
    )
    is_live: bool = Field(
        default=True,
        alias="isLive",
        validation_alias=AliasChoices("isLive", "is_live"),
    )

    model_config = ConfigDict(
        populate_by_name=True,
        serialize_by_alias=True,
        frozen=True,
        extra="ignore",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("thumbnail", "video_url", "streamer_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("streamer_avatar", mode="before")
    @classmethod
    def _default_avatar(cls, value: Any) -> Any:
        return value or DEFAULT_STREAMER_AVATAR

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> Any:
        return value or DEFAULT_CATEGORY

    @field_validator("viewer_count", mode="before")
    @classmethod
    def _default_viewer_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("is_vip_only", mode="before")
    @classmethod
    def _default_vip(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_live", mode="before")
    @classmethod
    def _default_live(cls, value: Any) -> Any:
        return True if value is None else value

    @property
    def has_media(self) -> bool:
        return bool(self.video_url.strip())


def visible_streams(streams: list[StreamRecord], premium: bool) -> list[StreamRecord]:
    """Streams the viewer may browse: VIP-only entries are hidden unless premium."""
    return [stream for stream in streams if premium or not stream.is_vip_only]


def hidden_vip_count(streams: list[StreamRecord], premium: bool) -> int:
    """Number of VIP-only streams filtered out of the visible catalog."""
    total_vip = sum(1 for stream in streams if stream.is_vip_only)
    visible_vip = sum(1 for stream in visible_streams(streams, premium) if stream.is_vip_only)
    return total_vip - visible_vip
