"""Pydantic schemas for post endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

POST_TYPE_PATTERN = r"^[a-z0-9_-]{1,20}$"

PostStatus = Literal["draft", "publish"]


class PostCreateRequest(BaseModel):
    """Request schema for saving a new post."""

    post_type: str = Field("post", pattern=POST_TYPE_PATTERN, description="Content type")
    title: str = Field("", max_length=255)
    content: str = Field("")
    status: PostStatus = Field("draft")


class PostUpdateRequest(BaseModel):
    """Request schema for saving changes to an existing post.

    All fields are optional. Only provided fields will be updated.
    """

    post_type: str | None = Field(None, pattern=POST_TYPE_PATTERN)
    title: str | None = Field(None, max_length=255)
    content: str | None = None
    status: PostStatus | None = None


class PostResponse(BaseModel):
    """Response schema for a single post, including exposed meta keys."""

    id: int
    post_type: str
    title: str
    content: str
    status: str
    created_at: datetime
    updated_at: datetime
    meta: dict[str, str | None] = Field(default_factory=dict)
