"""Token lookup service.

Resolves an entity to its access token and a token back to its entity.
A miss is reported as None; only storage failures raise.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowtokens.domain.entities.access_token import TOKEN_META_KEY, AccessToken
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.infrastructure.persistence.repositories.meta_repository import (
    MetaRepository,
)


class TokenLookup:
    """Read-only queries over stored access tokens."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def token_for(self, kind: EntityKind | str, entity_id: int) -> str | None:
        """Get the access token of an entity, or None if it has none."""
        kind = EntityKind.parse(kind)
        async with self._session_factory() as session:
            return await MetaRepository(session).read_attribute(kind, entity_id, TOKEN_META_KEY)

    async def entity_for(self, kind: EntityKind | str, token: str) -> int | None:
        """Get the id of the entity holding a token, or None if no entity does.

        Tokens are matched exactly, within the given kind only.
        """
        kind = EntityKind.parse(kind)
        if not AccessToken.is_well_formed(token):
            return None
        async with self._session_factory() as session:
            return await MetaRepository(session).find_entity_id(kind, TOKEN_META_KEY, token)

    async def resolve(self, kind: EntityKind | str, token: str) -> AccessToken | None:
        """Like entity_for, but returns the full AccessToken."""
        kind = EntityKind.parse(kind)
        entity_id = await self.entity_for(kind, token)
        if entity_id is None:
            return None
        return AccessToken(kind=kind, entity_id=entity_id, token=token)
