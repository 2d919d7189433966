"""Token issuing service.

Generates a random token for an entity, makes sure no other entity of the
same kind already holds it, and stores it as the entity's access token.

Uniqueness is checked twice: a scan before writing skips the obvious
collisions, and the partial unique index on the meta table rejects a
value that a concurrent request wrote between the scan and our insert.
Both cases are treated the same way: generate a new token and try again.

An entity never receives a second token. The write only fills an empty
attribute, and a writer that finds it already filled returns the stored
token instead.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowtokens.core.exceptions import (
    MetaKeyTakenError,
    MetaValueConflictError,
    StorageError,
    TokenSpaceExhaustedError,
)
from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.access_token import TOKEN_META_KEY
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.domain.services.token_generator import TokenGenerator
from flowtokens.infrastructure.persistence.repositories.meta_repository import (
    MetaRepository,
)

logger = get_logger(__name__)

# Growing by a multiple of 3 bytes keeps the encoding free of padding
WIDEN_STEP_BYTES = 3


class TokenIssuer:
    """Issues access tokens and stores them against users and posts.

    One instance is created at startup and shared by every request; each
    generation attempt runs in its own short-lived session.

    Args:
        session_factory: Factory for database sessions.
        generator: Token generator (defaults to 9-byte tokens).
        max_attempts: Upper bound on generation attempts per call.
        widen_after: Number of consecutive collisions after which the
            token length grows by three bytes.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        generator: TokenGenerator | None = None,
        max_attempts: int = 10,
        widen_after: int = 5,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if widen_after < 1:
            raise ValueError("widen_after must be at least 1")
        self._session_factory = session_factory
        self.generator = generator or TokenGenerator()
        self.max_attempts = max_attempts
        self.widen_after = widen_after

    async def issue_for(self, kind: EntityKind | str, entity_id: int) -> str:
        """Generate, store and return an access token for an entity.

        The write only fills an empty token attribute. If the entity already
        holds a token, including one stored by a concurrent call, that token
        is returned and nothing is replaced.

        Args:
            kind: Entity kind ("user" or "post").
            entity_id: Id of the owning entity.

        Returns:
            The stored token.

        Raises:
            TokenSpaceExhaustedError: If every attempt collided.
            StorageError: If the meta store fails.
        """
        kind = EntityKind.parse(kind)
        num_bytes = self.generator.num_bytes
        collisions = 0

        for attempt in range(1, self.max_attempts + 1):
            token = self.generator.generate(num_bytes)

            async with self._session_factory() as session:
                store = MetaRepository(session)
                if not await store.scan_exists(kind, TOKEN_META_KEY, token):
                    try:
                        await store.write_attribute(
                            kind, entity_id, TOKEN_META_KEY, token, overwrite=False
                        )
                        await self._commit(session)
                    except MetaValueConflictError:
                        pass
                    except MetaKeyTakenError as e:
                        logger.info(
                            "Entity already holds an access token",
                            entity_kind=kind.value,
                            entity_id=entity_id,
                        )
                        return e.existing_value
                    else:
                        logger.info(
                            "Access token issued",
                            entity_kind=kind.value,
                            entity_id=entity_id,
                            attempts=attempt,
                            token_length=len(token),
                        )
                        return token

            collisions += 1
            logger.debug(
                "Token collision, regenerating",
                entity_kind=kind.value,
                entity_id=entity_id,
                attempt=attempt,
            )
            if collisions % self.widen_after == 0:
                num_bytes += WIDEN_STEP_BYTES
                logger.warning(
                    "Widening access token after repeated collisions",
                    entity_kind=kind.value,
                    collisions=collisions,
                    num_bytes=num_bytes,
                )

        logger.error(
            "Access token space exhausted",
            entity_kind=kind.value,
            entity_id=entity_id,
            attempts=self.max_attempts,
        )
        raise TokenSpaceExhaustedError(kind.value, entity_id, self.max_attempts)

    @staticmethod
    async def _commit(session: AsyncSession) -> None:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise StorageError(f"Meta store commit failed: {e}", operation="commit") from e
