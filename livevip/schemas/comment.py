from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CommentEvent(BaseModel):
    """One entry of a stream's engagement log."""

    id: str
    author: str = Field(..., alias="user", validation_alias=AliasChoices("user", "author"))
    message: str
    timestamp: datetime
    avatar: str
    synthetic: bool = False

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, frozen=True)
