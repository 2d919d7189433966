"""Repository for user and post meta attributes.

This is the meta store the token services depend on. Users and posts keep
their attributes in separate tables, so every query is scoped to one
entity kind.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from flowtokens.core.exceptions import (
    MetaKeyTakenError,
    MetaValueConflictError,
    StorageError,
)
from flowtokens.core.logging import get_logger
from flowtokens.domain.entities.entity_kind import EntityKind
from flowtokens.infrastructure.persistence.models import (
    PostMetaModel,
    PostModel,
    UserMetaModel,
    UserModel,
)

logger = get_logger(__name__)


@contextmanager
def _storage_errors(operation: str, kind: EntityKind) -> Iterator[None]:
    """Translate SQLAlchemy errors raised inside the block into StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "Meta store operation failed",
            operation=operation,
            entity_kind=kind.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise StorageError(f"Meta store {operation} failed: {e}", operation=operation) from e


class MetaRepository:
    """Repository for meta attribute database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def _tables(kind: EntityKind):
        """Return (entity model, meta model, meta foreign key column) for a kind."""
        if kind is EntityKind.USER:
            return UserModel, UserMetaModel, UserMetaModel.user_id
        return PostModel, PostMetaModel, PostMetaModel.post_id

    async def read_attribute(
        self, kind: EntityKind, entity_id: int, meta_key: str
    ) -> str | None:
        """Read a single meta value.

        Returns:
            The stored value, or None when the entity has no such attribute
            (or it is stored empty).
        """
        _, meta_model, fk = self._tables(kind)
        with _storage_errors("read", kind):
            result = await self.session.execute(
                select(meta_model.meta_value).where(
                    fk == entity_id, meta_model.meta_key == meta_key
                )
            )
            value = result.scalar_one_or_none()
        return value or None

    async def _get_row(self, kind: EntityKind, entity_id: int, meta_key: str):
        _, meta_model, fk = self._tables(kind)
        result = await self.session.execute(
            select(meta_model).where(fk == entity_id, meta_model.meta_key == meta_key)
        )
        return result.scalar_one_or_none()

    async def write_attribute(
        self,
        kind: EntityKind,
        entity_id: int,
        meta_key: str,
        value: str,
        overwrite: bool = True,
    ) -> None:
        """Insert or update a single meta value and flush it.

        With ``overwrite=False`` the write only fills an empty attribute. The
        fill is a conditional insert or update, so of two concurrent writers
        exactly one succeeds and the other gets MetaKeyTakenError.

        Raises:
            MetaKeyTakenError: If ``overwrite`` is False and the entity
                already holds a non-empty value, or if a concurrent writer
                inserted the attribute first.
            MetaValueConflictError: If another entity already holds ``value``
                under a key with a uniqueness constraint.
            StorageError: For any other database failure, including writes
                for entities that do not exist.
        """
        _, meta_model, fk = self._tables(kind)
        try:
            row = await self._get_row(kind, entity_id, meta_key)
            if row is None:
                row = meta_model(meta_key=meta_key, meta_value=value)
                setattr(row, fk.key, entity_id)
                self.session.add(row)
                await self.session.flush()
            elif overwrite:
                row.meta_value = value
                await self.session.flush()
            elif row.meta_value:
                raise MetaKeyTakenError(meta_key, row.meta_value, operation="write")
            else:
                result = await self.session.execute(
                    update(meta_model)
                    .where(
                        fk == entity_id,
                        meta_model.meta_key == meta_key,
                        or_(meta_model.meta_value.is_(None), meta_model.meta_value == ""),
                    )
                    .values(meta_value=value)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    existing = await self.read_attribute(kind, entity_id, meta_key)
                    raise MetaKeyTakenError(meta_key, existing or "", operation="write")
        except IntegrityError as e:
            await self.session.rollback()
            if await self.scan_exists(kind, meta_key, value):
                raise MetaValueConflictError(meta_key, operation="write") from e
            # Lost the insert race on (entity, key) to a concurrent writer
            existing = await self.read_attribute(kind, entity_id, meta_key)
            if existing is not None:
                raise MetaKeyTakenError(meta_key, existing, operation="write") from e
            logger.error(
                "Meta store operation failed",
                operation="write",
                entity_kind=kind.value,
                entity_id=entity_id,
                error=str(e),
            )
            raise StorageError(f"Meta store write failed: {e}", operation="write") from e
        except SQLAlchemyError as e:
            logger.error(
                "Meta store operation failed",
                operation="write",
                entity_kind=kind.value,
                entity_id=entity_id,
                error=str(e),
            )
            raise StorageError(f"Meta store write failed: {e}", operation="write") from e

    async def scan_exists(self, kind: EntityKind, meta_key: str, value: str) -> bool:
        """Check whether any entity of a kind holds ``value`` under ``meta_key``."""
        _, meta_model, _ = self._tables(kind)
        with _storage_errors("scan", kind):
            result = await self.session.execute(
                select(func.count())
                .select_from(meta_model)
                .where(meta_model.meta_key == meta_key, meta_model.meta_value == value)
            )
            return result.scalar_one() > 0

    async def find_entity_id(
        self, kind: EntityKind, meta_key: str, value: str
    ) -> int | None:
        """Reverse lookup: the id of the entity holding ``value`` under ``meta_key``."""
        _, meta_model, fk = self._tables(kind)
        with _storage_errors("find", kind):
            result = await self.session.execute(
                select(fk)
                .where(meta_model.meta_key == meta_key, meta_model.meta_value == value)
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def entity_exists(self, kind: EntityKind, entity_id: int) -> bool:
        entity_model, _, _ = self._tables(kind)
        with _storage_errors("exists", kind):
            result = await self.session.execute(
                select(entity_model.id).where(entity_model.id == entity_id)
            )
            return result.scalar_one_or_none() is not None

    async def entities_missing(
        self,
        kind: EntityKind,
        meta_key: str,
        post_types: list[str] | None = None,
    ) -> list[int]:
        """List ids of entities that have no non-empty value for ``meta_key``.

        Args:
            kind: Entity kind to scan.
            meta_key: Meta key that should be present.
            post_types: For posts, restrict the scan to these types.

        Returns:
            Entity ids in ascending order.
        """
        entity_model, meta_model, fk = self._tables(kind)
        has_value = exists().where(
            fk == entity_model.id,
            meta_model.meta_key == meta_key,
            meta_model.meta_value.is_not(None),
            meta_model.meta_value != "",
        )
        stmt = select(entity_model.id).where(~has_value).order_by(entity_model.id)
        if kind is EntityKind.POST and post_types is not None:
            stmt = stmt.where(PostModel.post_type.in_(post_types))

        with _storage_errors("scan", kind):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
