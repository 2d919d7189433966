"""API route handlers."""

from flowtokens.infrastructure.api.routes.posts_router import router as posts_router
from flowtokens.infrastructure.api.routes.tokens_router import router as tokens_router
from flowtokens.infrastructure.api.routes.users_router import router as users_router

__all__ = [
    "posts_router",
    "tokens_router",
    "users_router",
]
