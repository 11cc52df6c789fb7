"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

DELETED_USER_NAME = "DELETED USER"


class OwnerSummary(BaseModel):
    """Public view of a post's author."""

    id: int | None = Field(None, description="Owner id; null when the account is gone")
    name: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def placeholder(cls) -> "OwnerSummary":
        """Stand-in for an owner whose record no longer exists."""
        return cls(id=None, name=DELETED_USER_NAME)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    image_key: str
    creator: OwnerSummary
    created_at: datetime
    updated_at: datetime


class PostEnvelope(BaseModel):
    message: str
    post: PostResponse


class FeedPage(BaseModel):
    """One page of the feed plus the total number of live posts."""

    message: str = "Posts fetched successfully"
    posts: list[PostResponse]
    total_items: int


class MessageResponse(BaseModel):
    message: str
