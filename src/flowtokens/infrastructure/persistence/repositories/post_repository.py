"""Post repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flowtokens.infrastructure.persistence.models import PostModel


class PostRepository:
    """Repository for post database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, post: PostModel) -> PostModel:
        """Insert a new post and assign its id."""
        self.session.add(post)
        await self.session.flush()
        return post

    async def get_by_id(self, post_id: int) -> PostModel | None:
        result = await self.session.execute(select(PostModel).where(PostModel.id == post_id))
        return result.scalar_one_or_none()

    async def update(self, post: PostModel) -> PostModel:
        """Persist changes to an existing post."""
        self.session.add(post)
        await self.session.flush()
        await self.session.refresh(post)
        return post
