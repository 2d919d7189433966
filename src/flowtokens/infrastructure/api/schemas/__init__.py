"""API request and response schemas."""

from flowtokens.infrastructure.api.schemas.posts_schemas import (
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from flowtokens.infrastructure.api.schemas.token_schemas import TokenResponse
from flowtokens.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "PostCreateRequest",
    "PostResponse",
    "PostUpdateRequest",
    "TokenResponse",
    "UserCreateRequest",
    "UserResponse",
    "UserUpdateRequest",
]
