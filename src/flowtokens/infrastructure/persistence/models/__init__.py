"""SQLAlchemy models for Flow Tokens tables.

All models inherit from the Base class defined in database.py and are
created on application startup outside production.
"""

from flowtokens.infrastructure.persistence.models.meta import PostMetaModel, UserMetaModel
from flowtokens.infrastructure.persistence.models.post import PostModel
from flowtokens.infrastructure.persistence.models.user import UserModel

__all__ = [
    "PostMetaModel",
    "PostModel",
    "UserMetaModel",
    "UserModel",
]
