"""Pydantic schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    """Request schema for registering a new user."""

    email: EmailStr = Field(..., description="User's email address")
    display_name: str = Field("", max_length=255, description="Name shown on the profile")


class UserUpdateRequest(BaseModel):
    """Request schema for updating a user profile.

    All fields are optional. Only provided fields will be updated.
    """

    email: EmailStr | None = Field(None, description="User's email address")
    display_name: str | None = Field(None, max_length=255, description="Name shown on the profile")


class UserResponse(BaseModel):
    """Response schema for a single user.

    ``meta`` contains the meta keys registered for the API, such as the
    user's ``flow_rand_tok`` access token.
    """

    id: int
    email: str
    display_name: str
    created_at: datetime
    updated_at: datetime
    meta: dict[str, str | None] = Field(default_factory=dict)
