"""Entity event handler for access tokens.

Decides, for each user or post lifecycle event, whether a token must be
issued:

- a registered user always gets a token;
- an updated user gets one only if it has none yet (accounts created
  before tokens existed are filled in lazily);
- a saved post gets one only if its type is tracked and it is new or
  still has no token. An existing post token is never replaced.
"""

from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowtokens.core.config import Settings
from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.access_token import TOKEN_META_KEY, AccessToken
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.services.token_generator import TokenGenerator
from flowtokens.domain.services.token_issuer import TokenIssuer
from flowtokens.domain.services.token_lookup import TokenLookup
from flowtokens.infrastructure.persistence.repositories.meta_repository import (
    MetaRepository,
)

logger = get_logger(__name__)

DEFAULT_TRACKED_POST_TYPES = ("job_sheet", "act")


class TokenEventHandler:
    """Applies the token rules to entity lifecycle events.

    Both handler methods return the token the entity holds after the
    event, or None when the entity is not tracked.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        lookup: TokenLookup,
        tracked_post_types: Iterable[str] = DEFAULT_TRACKED_POST_TYPES,
    ) -> None:
        self.issuer = issuer
        self.lookup = lookup
        self.tracked_post_types = frozenset(tracked_post_types)

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> "TokenEventHandler":
        """Build a handler and its issuer and lookup from application settings."""
        issuer = TokenIssuer(
            session_factory,
            generator=TokenGenerator(settings.token_bytes),
            max_attempts=settings.token_max_attempts,
            widen_after=settings.token_widen_after,
        )
        return cls(issuer, TokenLookup(session_factory), settings.tracked_post_types)

    def is_tracked(self, kind: EntityKind | str, post_type: str | None = None) -> bool:
        """Check whether entities of this kind (and post type) carry tokens."""
        kind = EntityKind.parse(kind)
        if kind is EntityKind.USER:
            return True
        return post_type in self.tracked_post_types

    async def on_entity_created(
        self,
        kind: EntityKind | str,
        entity_id: int,
        post_type: str | None = None,
    ) -> str | None:
        """Handle a newly created entity."""
        kind = EntityKind.parse(kind)
        if kind is EntityKind.USER:
            return await self.issuer.issue_for(kind, entity_id)
        return await self.on_entity_saved(kind, entity_id, post_type, update=False)

    async def on_entity_saved(
        self,
        kind: EntityKind | str,
        entity_id: int,
        post_type: str | None = None,
        update: bool = True,
    ) -> str | None:
        """Handle a saved (or, for users, updated) entity.

        Args:
            kind: Entity kind.
            entity_id: Id of the saved entity.
            post_type: Post type, required for posts.
            update: False when the save inserted a new post.
        """
        kind = EntityKind.parse(kind)
        if not self.is_tracked(kind, post_type):
            return None

        if kind is EntityKind.POST and not update:
            return await self.issuer.issue_for(kind, entity_id)

        current = await self.lookup.token_for(kind, entity_id)
        if current:
            return current

        logger.info(
            "Entity has no access token, issuing one",
            entity_kind=kind.value,
            entity_id=entity_id,
        )
        return await self.issuer.issue_for(kind, entity_id)

    async def backfill(
        self,
        kind: EntityKind | str,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> list[AccessToken]:
        """Issue tokens to every tracked entity of a kind that has none.

        Returns:
            The tokens issued, in entity id order.
        """
        kind = EntityKind.parse(kind)
        post_types = sorted(self.tracked_post_types) if kind is EntityKind.POST else None
        async with session_factory() as session:
            missing = await MetaRepository(session).entities_missing(
                kind, TOKEN_META_KEY, post_types=post_types
            )

        issued = []
        for entity_id in missing:
            token = await self.issuer.issue_for(kind, entity_id)
            issued.append(AccessToken(kind=kind, entity_id=entity_id, token=token))

        logger.info("Backfill complete", entity_kind=kind.value, issued=len(issued))
        return issued
