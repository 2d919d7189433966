"""Persistence repositories for database operations."""

from flowtokens.infrastructure.persistence.repositories.meta_repository import (
    MetaRepository,
)
from flowtokens.infrastructure.persistence.repositories.post_repository import (
    PostRepository,
)
from flowtokens.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "MetaRepository",
    "PostRepository",
    "UserRepository",
]
