from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LiveApiError(BaseModel):
    """Error body returned by the live API on non-2xx responses."""

    error: str = Field(..., description="Human-readable error message")


class StreamCreateBody(BaseModel):
    """Request body for creating a catalog entry.

    Only title, thumbnail and streamerName are required; the catalog store
    fills in the rest.
    """

    title: str = Field(..., min_length=1)
    thumbnail: str = Field(..., min_length=1)
    streamer_name: str = Field(
        ...,
        min_length=1,
        alias="streamerName",
        validation_alias=AliasChoices("streamerName", "streamer_name"),
    )
    video_url: str | None = Field(
        default=None,
        alias="videoUrl",
        validation_alias=AliasChoices("videoUrl", "video_url"),
    )
    streamer_avatar: str | None = Field(
        default=None,
        alias="streamerAvatar",
        validation_alias=AliasChoices("streamerAvatar", "streamer_avatar"),
    )
    category: str | None = None
    viewer_count: int | None = Field(
        default=None,
        alias="viewerCount",
        validation_alias=AliasChoices("viewerCount", "viewer_count"),
    )
    is_vip_only: bool | None = Field(
        default=None,
        alias="isVipOnly",
        validation_alias=AliasChoices("isVipOnly", "is_vip_only"),
    )

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)


class StreamUpdateBody(BaseModel):
    """Partial update of a catalog entry; unset fields are left untouched."""

    id: str
    title: str | None = None
    thumbnail: str | None = None
    video_url: str | None = Field(
        default=None,
        alias="videoUrl",
        validation_alias=AliasChoices("videoUrl", "video_url"),
    )
    streamer_name: str | None = Field(
        default=None,
        alias="streamerName",
        validation_alias=AliasChoices("streamerName", "streamer_name"),
    )
    streamer_avatar: str | None = Field(
        default=None,
        alias="streamerAvatar",
        validation_alias=AliasChoices("streamerAvatar", "streamer_avatar"),
    )
    category: str | None = None
    viewer_count: int | None = Field(
        default=None,
        alias="viewerCount",
        validation_alias=AliasChoices("viewerCount", "viewer_count"),
    )
    is_vip_only: bool | None = Field(
        default=None,
        alias="isVipOnly",
        validation_alias=AliasChoices("isVipOnly", "is_vip_only"),
    )
    is_live: bool | None = Field(
        default=None,
        alias="isLive",
        validation_alias=AliasChoices("isLive", "is_live"),
    )

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)


class EntitlementCheckBody(BaseModel):
    email: str = Field(..., min_length=1)


class EntitlementUser(BaseModel):
    name: str | None = None


class EntitlementCheckResponse(BaseModel):
    """Response of the entitlement check endpoint."""

    is_premium: bool = Field(
        default=False,
        alias="isPremium",
        validation_alias=AliasChoices("isPremium", "is_premium"),
    )
    premium_until: datetime | None = Field(
        default=None,
        alias="premiumUntil",
        validation_alias=AliasChoices("premiumUntil", "premium_until"),
    )
    user: EntitlementUser | None = None

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)
